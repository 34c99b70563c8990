import os
from dataclasses import dataclass


@dataclass(frozen=True)
class Settings:
    checklist_workers: int = int(os.getenv("ONBOARDING_CHECKLIST_WORKERS", "7"))


settings = Settings()
