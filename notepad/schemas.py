from pydantic import BaseModel, ConfigDict, Field


class NoteBase(BaseModel):
    title: str = Field(..., description="Note title.")
    body: str = Field(..., description="Note body.")


class NoteCreate(NoteBase):
    """Schema for creating a note."""
    title: str = Field(..., min_length=1, description="Note title (non-empty).")


class NoteUpdate(BaseModel):
    """Schema for updating a note (partial update)."""
    title: str | None = Field(None, min_length=1, description="Updated title (non-empty).")
    body: str | None = Field(None, description="Updated body.")


class NoteRecord(NoteBase):
    """A stored note as handed out by a cursor."""
    model_config = ConfigDict(from_attributes=True, frozen=True)

    id: int = Field(..., description="Row identifier assigned by the store.")
