from __future__ import annotations

from latam_jobs.core.logging import get_logger
from latam_jobs.db.database import SessionLocal
from latam_jobs.models.source import JobSource

logger = get_logger(__name__)


def default_sources() -> list[dict]:
    return [
        {
            "name": "Nubank",
            "provider_type": "greenhouse",
            "provider_config": {"boardToken": "nubank"},
            "company_website": "https://nubank.com.br",
        },
        {
            "name": "Wildlife Studios",
            "provider_type": "greenhouse",
            "provider_config": {"boardToken": "wildlifestudios"},
            "company_website": "https://wildlifestudios.com",
        },
        {
            "name": "Deel",
            "provider_type": "ashby",
            "provider_config": {"jobBoardName": "deel"},
            "company_website": "https://www.deel.com",
        },
        {
            "name": "Runway",
            "provider_type": "ashby",
            "provider_config": {"jobBoardName": "runway"},
            "company_website": "https://runwayml.com",
        },
        {
            "name": "Plaid",
            "provider_type": "lever",
            "provider_config": {"companyIdentifier": "plaid"},
            "company_website": "https://plaid.com",
        },
    ]


def seed_sources_if_empty() -> None:
    db = SessionLocal()
    try:
        existing = {s.name for s in db.query(JobSource).all()}
        # Only add what is missing; is_enabled on existing rows belongs to the operators.
        added = 0
        for item in default_sources():
            if item["name"] in existing:
                continue
            db.add(JobSource(is_enabled=True, **item))
            added += 1
        db.commit()
        if added:
            logger.info("seeded %s default job sources", added)
    finally:
        db.close()
