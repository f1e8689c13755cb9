from typing import Literal

from pydantic import BaseModel, Field

SkinTone = Literal["light", "mediumLight", "medium", "mediumDark", "dark"]
GenderPresentation = Literal["male", "female", "neutral"]


class AvatarPreferences(BaseModel):
    """환자 아바타 외형 설정"""

    patient_id: str = Field(..., description="환자 식별자")
    skin_tone: SkinTone = "medium"
    gender_presentation: GenderPresentation = "neutral"
    updated_at: str | None = Field(default=None, description="수정 시각")
