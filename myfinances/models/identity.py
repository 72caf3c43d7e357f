"""
Identity Models

An Identity is the normalized profile of the signed-in user. Its id is the
only partition key for ledger storage.

DESIGN DECISION: The two providers answer with incompatible shapes.
Instead of one loosely-typed dict, each shape is its own model and the
union is discriminated on `kind`. Every variant gets its own
normalization function (see services/auth/providers.py).
"""

from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class Identity(BaseModel):
    """
    Authenticated user's profile.

    Persisted as JSON under the session key and restored on startup.
    """
    model_config = ConfigDict(str_strip_whitespace=True, frozen=True)

    id: str = Field(
        ...,
        min_length=1,
        description="Provider-assigned user id"
    )
    name: str = Field(
        default="",
        description="Display name"
    )
    email: str = Field(
        default="",
        description="E-mail address (may be empty for returning Apple users)"
    )
    photo: Optional[str] = Field(
        default=None,
        description="Avatar URI if the provider has one"
    )


# =============================================================================
# PROVIDER OUTCOMES - tagged union
# =============================================================================

class GoogleUserInfo(BaseModel):
    """Profile returned by the Google userinfo endpoint."""
    model_config = ConfigDict(extra="ignore")

    kind: Literal["google"] = "google"
    id: str = Field(..., min_length=1)
    email: Optional[str] = None
    given_name: Optional[str] = None
    name: Optional[str] = None
    picture: Optional[str] = None


class AppleFullName(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    given_name: Optional[str] = Field(default=None, alias="givenName")
    family_name: Optional[str] = Field(default=None, alias="familyName")


class AppleCredential(BaseModel):
    """
    Native Apple credential.

    Apple sends email and full name only on the first authorization,
    so both may be missing afterwards.
    """
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    kind: Literal["apple"] = "apple"
    user: str = Field(..., min_length=1)
    email: Optional[str] = None
    full_name: Optional[AppleFullName] = Field(default=None, alias="fullName")


class AuthFailure(BaseModel):
    """A provider exchange that did not produce a profile."""

    kind: Literal["failure"] = "failure"
    reason: str
    cancelled: bool = False


ProviderOutcome = Annotated[
    Union[GoogleUserInfo, AppleCredential, AuthFailure],
    Field(discriminator="kind"),
]
