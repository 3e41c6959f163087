"""Decorating and filtering profiles for the match grid.

Filtering is plain case-insensitive containment over the decorated view, so
the defaults below (age 25, placeholder city) take part in matching exactly as
they are displayed.
"""

from app.profiles.schemas import PLACEHOLDER_NAME, Profile
from app.utils.display_hash import compute_compatibility, compute_online

from .schemas import MatchFilters, MatchProfile


DEFAULT_AGE = 25
DEFAULT_CITY = "Lokasi belum diatur"
DEFAULT_TAG = "SoulMatch"
ALL_OPTION = "semua"


def to_match_profile(profile: Profile) -> MatchProfile:
    age = profile.age if profile.age and profile.age > 0 else DEFAULT_AGE
    return MatchProfile(
        id=profile.id,
        name=profile.name or PLACEHOLDER_NAME,
        age=age,
        city=profile.city or DEFAULT_CITY,
        pekerjaan=profile.pekerjaan,
        interests=profile.interests,
        about=profile.about,
        main_photo=profile.main_photo,
        interest_tag=profile.interests[0] if profile.interests else DEFAULT_TAG,
        compatibility=compute_compatibility(profile.id),
        online=compute_online(profile.id),
    )


def age_matches_range(age: int, age_range: str) -> bool:
    """``"25-34"`` style ranges; blank, "Semua" or unparsable match everything."""
    if not age_range or age_range.strip().lower() == ALL_OPTION:
        return True

    bounds = age_range.split("-")
    if len(bounds) != 2:
        return True
    try:
        low, high = int(bounds[0]), int(bounds[1])
    except ValueError:
        return True
    return low <= age <= high


def _contains(haystack: str | None, needle: str) -> bool:
    return bool(haystack) and needle in haystack.lower()


def _active(value: str) -> str:
    value = value.strip().lower()
    return "" if value == ALL_OPTION else value


def matches(profile: MatchProfile, filters: MatchFilters) -> bool:
    query = filters.q.strip().lower()
    if query:
        vibe = profile.pekerjaan or DEFAULT_TAG
        if query not in f"{profile.name} {profile.city} {vibe}".lower():
            return False

    if not age_matches_range(profile.age, filters.age):
        return False

    location = _active(filters.location)
    if location and not _contains(profile.city, location):
        return False

    job = _active(filters.pekerjaan)
    if job and not _contains(profile.pekerjaan, job):
        return False

    interest = _active(filters.interest)
    if interest:
        sources = [profile.interest_tag, *profile.interests]
        if not any(_contains(source, interest) for source in sources):
            return False

    if filters.online and not profile.online:
        return False

    return True


def filter_profiles(
    profiles: list[Profile], caller_id: str, filters: MatchFilters
) -> list[MatchProfile]:
    decorated = [to_match_profile(p) for p in profiles if p.id != caller_id]
    return [p for p in decorated if matches(p, filters)]
