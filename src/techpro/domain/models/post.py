"""Post and author profile domain models."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Profile(BaseModel):
    """Public profile of a TechPro user."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    id: str | None = None
    username: str | None = None
    full_name: str | None = None
    avatar_url: str | None = None


class Post(BaseModel):
    """A feed post with optional image, video and PDF attachments."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    id: str
    user_id: str
    content: str = ""
    image_url: str | None = None
    image_urls: list[str] = Field(default_factory=list)
    video_url: str | None = None
    video_thumbnail_url: str | None = None
    video_duration: float | None = None
    video_size: int | None = None
    pdf_url: str | None = None
    pdf_filename: str | None = None
    pdf_size: int | None = None
    pdf_pages: int | None = None
    created_at: datetime
    updated_at: datetime | None = None
    profiles: Profile | None = None

    @field_validator("content", mode="before")
    @classmethod
    def coerce_content(cls, v: object) -> object:
        """Treat a null content column as an empty post body."""
        return "" if v is None else v

    @field_validator("image_urls", mode="before")
    @classmethod
    def coerce_image_urls(cls, v: object) -> object:
        """Treat a null image_urls column as no images."""
        return [] if v is None else v

    def media_urls(self) -> list[str]:
        """Return every attached media URL, without duplicates.

        Order: legacy single image, image gallery, video, video thumbnail, PDF.
        """
        candidates = [
            self.image_url,
            *self.image_urls,
            self.video_url,
            self.video_thumbnail_url,
            self.pdf_url,
        ]
        urls: list[str] = []
        for url in candidates:
            if url and url not in urls:
                urls.append(url)
        return urls
