"""
Administrator match candidate endpoint
"""
from typing import List

from fastapi import APIRouter, Depends

from bloodlink.database.schemas import MatchCandidate
from bloodlink.database.storage import Repository
from bloodlink.api.utils import get_repository
from bloodlink.services.matching import get_all_matches

router = APIRouter()


@router.get("/matches", response_model=List[MatchCandidate])
async def list_matches(limit: int = 0, repository: Repository = Depends(get_repository)):
    """
    All available-donor x compatible-recipient pairs, best score first

    limit (optional): maximum number of candidates (default: no limit)
    """
    matches = get_all_matches(repository)
    if limit > 0:
        matches = matches[:limit]
    return matches
