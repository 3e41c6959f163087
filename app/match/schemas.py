from typing import List, Optional

from pydantic import BaseModel


class MatchProfile(BaseModel):
    id: str
    name: str
    age: int
    city: str
    pekerjaan: Optional[str] = None
    interests: List[str] = []
    about: Optional[str] = None
    main_photo: Optional[str] = None
    interest_tag: str
    compatibility: int
    online: bool


class MatchFilters(BaseModel):
    q: str = ""
    age: str = ""
    location: str = ""
    pekerjaan: str = ""
    interest: str = ""
    online: bool = False


class MatchProfilesResponseModel(BaseModel):
    profiles: List[MatchProfile]
    total: int
