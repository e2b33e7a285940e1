"""카탈로그 조회 (콘테스트·참가자·스페셜). 관리 콘솔이 저장한 JSON 을 읽기만 한다."""

from src.catalog.provider import (
    Catalog,
    CatalogRef,
    Contest,
    Participant,
    ParticipantRef,
    Special,
    SpecialItemRef,
)

__all__ = [
    "Catalog",
    "CatalogRef",
    "Contest",
    "Participant",
    "ParticipantRef",
    "Special",
    "SpecialItemRef",
]
