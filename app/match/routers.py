from fastapi import APIRouter, Depends
from supabase import Client

from app.core.supabase_client import get_supabase
from app.core.dependencies import get_current_user_id
from app.core.errors import UpstreamFailure, upstream_message
from app.profiles.schemas import PROFILE_DETAIL_COLUMNS, Profile

from .filters import filter_profiles
from .schemas import MatchFilters, MatchProfilesResponseModel


router = APIRouter()


@router.get("/profiles", response_model=MatchProfilesResponseModel, status_code=200)
def list_match_profiles(
    filters: MatchFilters = Depends(),
    user_id: str = Depends(get_current_user_id),
    supabase: Client = Depends(get_supabase),
):
    """
    Browse candidate profiles.

    Returns every profile except the caller's, newest first, decorated with a
    cosmetic compatibility score and online flag.

    **Query Parameters** (all optional, case-insensitive)
    - `q`: matches name, city or occupation
    - `age`: range such as `25-34`, or `Semua`
    - `location`, `pekerjaan`, `interest`: substring filters
    - `online`: only profiles shown as online

    **Errors**
    - 401: Missing or invalid token
    - 500: Database error
    """
    try:
        result = (
            supabase.table("profiles")
            .select(PROFILE_DETAIL_COLUMNS)
            .order("created_at", desc=True)
            .execute()
        )
    except Exception as e:
        raise UpstreamFailure("Failed to load profiles.", upstream_message(e))

    profiles = [Profile(**row) for row in result.data or []]
    matched = filter_profiles(profiles, user_id, filters)

    return {"profiles": matched, "total": len(matched)}
