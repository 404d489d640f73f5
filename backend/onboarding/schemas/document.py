from pydantic import BaseModel, Field


class DocumentSummary(BaseModel):
    type: str
    title: str
    filename: str
    ready: bool
    reason: str | None = None


class DocumentPreview(BaseModel):
    type: str
    title: str
    document_id: str | None
    html: str


class RenderOptions(BaseModel):
    format: str | None = None
    filename: str | None = None
    header: str | None = None


class RenderRequest(BaseModel):
    html_content: str | None = Field(default=None, alias="htmlContent")
    options: RenderOptions | None = None
