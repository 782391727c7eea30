"""
LinkedIn manual-entry connector.

LinkedIn offers no public profile API. Candidates submit their
profile as structured input; fetch() reads the latest submission
instead of calling the network, so it satisfies the same
connector contract as the HTTP connectors.
"""

import logging
from typing import Optional, Protocol

from pydantic import ValidationError

from core.exceptions import MalformedDataError
from platform_metrics.types import (
    LinkedInCertification,
    LinkedInData,
    LinkedInEducation,
    LinkedInPosition,
    LinkedInProfile,
    LinkedInSkill,
    Platform,
)

from .exceptions import ManualEntryMissingError
from .schemas import LinkedInManualEntry


logger = logging.getLogger(__name__)


class ManualEntryStore(Protocol):
    """Where submitted LinkedIn entries live (see storage.persistence)."""

    async def get_manual_entry(self, platform: Platform, candidate_id: str, username: str) -> Optional[dict]:
        ...


def to_linkedin_data(entry: LinkedInManualEntry) -> LinkedInData:
    """Decode a validated manual entry into the typed LinkedIn variant."""
    return LinkedInData(
        profile=LinkedInProfile(
            username=entry.username,
            profile_url=entry.profile_url,
            headline=entry.headline or None,
            bio=entry.bio or None,
            location=entry.location,
            connections=entry.connections,
            education=[
                LinkedInEducation(
                    school=e.school,
                    degree=e.degree,
                    field_of_study=e.field_of_study,
                    start_year=e.start_year,
                    end_year=e.end_year,
                )
                for e in entry.education
            ],
            skills=[LinkedInSkill(name=s.name, endorsements=s.endorsements) for s in entry.skills],
            certifications=[
                LinkedInCertification(name=c.name, authority=c.authority, issued=c.issued)
                for c in entry.certifications
            ],
        ),
        activity=[
            LinkedInPosition(
                title=x.title,
                company=x.company,
                start=x.start_date,
                end=x.end_date,
                description=x.description,
                location=x.location,
            )
            for x in entry.experiences
        ],
    )


class LinkedInManualConnector:
    """Connector variant backed by previously submitted input."""

    def __init__(self, store: ManualEntryStore) -> None:
        self._store = store

    @property
    def platform(self) -> Platform:
        return Platform.LINKEDIN

    async def fetch(self, username: str, candidate_id: Optional[str] = None) -> LinkedInData:
        """
        Read and decode the candidate's stored submission.

        Entries are stored per candidate; without ``candidate_id``
        there is nothing to read.

        Raises:
            ManualEntryMissingError: Nothing submitted by this candidate for the username
            MalformedDataError: Stored payload no longer validates
        """
        if candidate_id is None:
            raise ManualEntryMissingError("linkedin", username)
        payload = await self._store.get_manual_entry(Platform.LINKEDIN, candidate_id, username)
        if payload is None:
            raise ManualEntryMissingError("linkedin", username)

        try:
            entry = LinkedInManualEntry.model_validate(payload)
        except ValidationError as e:
            raise MalformedDataError(
                f"Stored LinkedIn entry for '{username}' is invalid",
                platform="linkedin",
                cause=e,
            ) from e

        logger.debug(f"[linkedin] Loaded manual entry for {username}")
        return to_linkedin_data(entry)
