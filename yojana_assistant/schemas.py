"""
Request/Response Models
Wire shapes for the chat API
"""
from typing import Any, Dict, List, Optional, Annotated

from pydantic import BaseModel, Field, StringConstraints
from pydantic.alias_generators import to_camel


class ChatContext(BaseModel):
    """Optional client context sent along with a message"""
    userId: Optional[str] = None
    locale: Optional[str] = None
    app: Optional[str] = None
    awaitingAge: bool = False

    class Config:
        extra = "allow"


class ChatRequest(BaseModel):
    message: Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]
    context: Optional[ChatContext] = None


class Link(BaseModel):
    label: str
    url: str


class Scheme(BaseModel):
    """Normalized welfare scheme (yojana) record"""
    id: str
    name: str
    description: Optional[str] = None
    min_age: Optional[int] = None
    max_age: Optional[int] = None
    application_deadline: Optional[str] = None
    publish_date: Optional[str] = None
    required_disability_percentage: Optional[int] = None
    applicable_disability_types: Optional[str] = None
    publisher: Optional[str] = None

    class Config:
        alias_generator = to_camel
        populate_by_name = True
        frozen = True


class ChatResponse(BaseModel):
    message: str
    links: List[Link] = Field(default_factory=list)
    yojanas: List[Scheme] = Field(default_factory=list)

    def to_wire(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True)


class ErrorResponse(BaseModel):
    message: str
    errors: List[Dict[str, Any]] = Field(default_factory=list)
    links: List[Link] = Field(default_factory=list)
    yojanas: List[Scheme] = Field(default_factory=list)
