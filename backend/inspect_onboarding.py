import os
import sys

from dotenv import load_dotenv

load_dotenv()

from onboarding_module import init_onboarding_module
from onboarding_module.checklist import build_checklist, unmet_required
from onboarding_module.repository import ProgressRepository
from onboarding_module.steps import visible_step_ids
from rbac_module.database import SessionLocal
from school_module import SqlDomainCounters

INSTITUTION_ID = int(os.getenv("INSTITUTION_ID", "1"))
AS_ROLES = [r.strip() for r in os.getenv("AS_ROLES", "institution_admin").split(",") if r.strip()]


def inspect_onboarding(institution_id: int, roles: list[str]):
    init_onboarding_module()
    db = SessionLocal()
    try:
        print(f"--- PROGRESS (institution {institution_id}) ---")
        progress = ProgressRepository(db).get(institution_id)
        if progress is None:
            print("Not started")
        else:
            print(f"current_step: {progress.current_step.value}")
            print(f"completed:    {', '.join(sorted(s.value for s in progress.completed_steps)) or '-'}")
            print(f"locked:       {progress.is_locked} (version {progress.version})")

        print(f"\n--- VISIBLE STEPS as {', '.join(roles)} ---")
        for step in visible_step_ids(roles):
            print(step.value)

        print("\n--- CHECKLIST ---")
        items = build_checklist(SqlDomainCounters(SessionLocal), institution_id, roles)
        for item in items:
            flag = "required" if item.required else "advisory"
            print(f"{item.id.value:<15} {item.status.value:<11} {flag:<9} count={item.count}")
        missing = unmet_required(items)
        print(f"\nCan go live: {not missing}" + (f" (missing: {', '.join(missing)})" if missing else ""))
    finally:
        db.close()


if __name__ == "__main__":
    institution_id = int(sys.argv[1]) if len(sys.argv) > 1 else INSTITUTION_ID
    inspect_onboarding(institution_id, AS_ROLES)
