"""Request and response types shared by every provider."""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Literal
from uuid import uuid4

from pydantic import BaseModel, Field


class ProviderKind(str, Enum):
    """Upstream service that serves a model."""

    CEREBRAS = "cerebras"
    GATEWAY = "gateway"


class ChatMessage(BaseModel):
    """A single message in OpenAI chat format."""

    role: Literal["system", "user", "assistant", "tool"] = Field(..., description="Message author role")
    content: str = Field(..., description="Message text")


class GenerateRequest(BaseModel):
    """Request sent to a resolved model handle."""

    messages: list[ChatMessage] = Field(..., min_length=1, description="Conversation so far")
    system_prompt: str | None = Field(None, description="Optional system prompt")
    temperature: float = Field(0.7, ge=0.0, le=2.0, description="Sampling temperature")
    max_tokens: int = Field(2000, ge=1, le=100000, description="Maximum tokens to generate")
    tools: list[dict[str, Any]] | None = Field(None, description="OpenAI-style tool definitions")

    def to_openai_messages(self) -> list[dict[str, str]]:
        """Flatten into the wire format, system prompt first."""
        messages = [m.model_dump() for m in self.messages]
        if self.system_prompt:
            messages.insert(0, {"role": "system", "content": self.system_prompt})
        return messages


class GenerateResponse(BaseModel):
    """Completed (non-streaming) generation."""

    id: str = Field(default_factory=lambda: f"gen-{uuid4()}")
    model: str = Field(..., description="Model id as requested by the caller")
    provider: str = Field(..., description="Provider that served the request")
    content: str = Field(..., description="Generated content")
    tokens_input: int = Field(0, description="Input token count")
    tokens_output: int = Field(0, description="Output token count")
    latency_ms: int = Field(0, description="Generation latency in milliseconds")
    finish_reason: str = Field("stop", description="Reason for completion")
    generation_id: str | None = Field(None, description="Upstream generation id, when reported")
    cached: bool = Field(False, description="Served from the response cache")
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def total_tokens(self) -> int:
        """Total tokens used."""
        return self.tokens_input + self.tokens_output


class StreamChunk(BaseModel):
    """A chunk of streamed response."""

    id: str
    content: str
    done: bool = False
    finish_reason: str | None = None
    tokens_output: int | None = None
