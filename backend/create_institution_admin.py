import os

from dotenv import load_dotenv

load_dotenv()

from rbac_module import init_rbac_module
from rbac_module.database import SessionLocal
from rbac_module.models import Institution, RoleAssignment, User
from rbac_module.roles import Role
from rbac_module.security import hash_password

# Configuration
NEW_INSTITUTION_NAME = os.getenv("NEW_INSTITUTION_NAME", "Green Valley High")
NEW_INSTITUTION_EMAIL = os.getenv("NEW_INSTITUTION_EMAIL", "")
OWNER_EMAIL = os.getenv("OWNER_EMAIL", "owner@greenvalley.edu")
OWNER_PASSWORD = os.getenv("OWNER_PASSWORD", "ChangeMe@123")


def create_institution_admin():
    init_rbac_module()
    db = SessionLocal()
    try:
        institution = db.query(Institution).filter(Institution.name == NEW_INSTITUTION_NAME).first()
        if institution:
            print(f"Institution '{NEW_INSTITUTION_NAME}' already exists with ID: {institution.id}")
        else:
            institution = Institution(name=NEW_INSTITUTION_NAME, email=NEW_INSTITUTION_EMAIL or None)
            db.add(institution)
            db.flush()
            print(f"Institution created with ID: {institution.id}")

        owner = db.query(User).filter(User.email == OWNER_EMAIL.lower()).first()
        if owner:
            print(f"User {OWNER_EMAIL} already exists. Skipping.")
        else:
            owner = User(email=OWNER_EMAIL.lower(), full_name="Institution Owner", password_hash=hash_password(OWNER_PASSWORD))
            db.add(owner)
            db.flush()
            print(f"Created user {OWNER_EMAIL}")

        assigned = (
            db.query(RoleAssignment)
            .filter(
                RoleAssignment.user_id == owner.id,
                RoleAssignment.role == Role.INSTITUTION_OWNER.value,
                RoleAssignment.institution_id == institution.id,
            )
            .first()
        )
        if not assigned:
            db.add(RoleAssignment(user_id=owner.id, role=Role.INSTITUTION_OWNER.value, institution_id=institution.id))
            print(f"Assigned {Role.INSTITUTION_OWNER.value} to {OWNER_EMAIL}")

        db.commit()
        print("Done.")
    except Exception as e:
        db.rollback()
        print(f"Error: {e}")
        raise
    finally:
        db.close()


if __name__ == "__main__":
    create_institution_admin()
