from pydantic import BaseModel, ConfigDict, Field
from typing import Literal


class Credentials(BaseModel):
    username: str = Field(min_length=1, max_length=120)
    password: str = Field(min_length=1)


class RegisterResponse(BaseModel):
    id: int


class LoginResponse(BaseModel):
    token: str
    role: str


class MeResponse(BaseModel):
    id: int
    username: str
    role: str
    points: int
    model_config = ConfigDict(from_attributes=True)


class AdIn(BaseModel):
    title: str = Field(min_length=1)
    url: str = Field(min_length=1)
    duration: int = Field(ge=0)
    reward_points: int = Field(ge=0)


class AdOut(BaseModel):
    id: int
    title: str
    url: str
    duration: int
    reward_points: int
    model_config = ConfigDict(from_attributes=True)


class CreatedResponse(BaseModel):
    id: int


class ViewResponse(BaseModel):
    success: bool
    reward: int


class RedeemRequest(BaseModel):
    reward: str = Field(min_length=1)


class SuccessResponse(BaseModel):
    success: bool = True


class RedemptionOut(BaseModel):
    id: int
    user_id: int
    reward: str
    status: Literal["pending", "approved", "rejected"]
    model_config = ConfigDict(from_attributes=True)
