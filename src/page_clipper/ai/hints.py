"""Platform-specific extraction hints keyed on the source URL."""

import re
from urllib.parse import parse_qs, urlparse

from pydantic import BaseModel


class SiteHint(BaseModel):
    """Extra prompt guidance for a well-known content platform."""

    name: str
    description: str

    hosts: list[str] = []
    # First capture group is the identifier of the primary resource.
    id_patterns: list[str] = []
    id_query_param: str | None = None
    instructions: str
    id_instructions: str = ""

    def matches(self, url: str) -> bool:
        host = (urlparse(url).hostname or "").lower()
        return any(host == h or host.endswith("." + h) for h in self.hosts)

    def resource_id(self, url: str) -> str | None:
        parsed = urlparse(url)
        if self.id_query_param:
            values = parse_qs(parsed.query).get(self.id_query_param)
            if values and values[0]:
                return values[0]
        for pattern in self.id_patterns:
            match = re.search(pattern, parsed.path)
            if match:
                return match.group(1)
        return None

    def render(self, url: str) -> str:
        lines = [f"PLATFORM NOTES ({self.description}):", self.instructions]
        resource_id = self.resource_id(url)
        if resource_id and self.id_instructions:
            lines.append(self.id_instructions.format(id=resource_id))
        return "\n".join(lines)


VIDEO_HINT = SiteHint(
    name="video",
    description="video host",
    hosts=["youtube.com", "youtu.be", "vimeo.com"],
    id_query_param="v",
    id_patterns=[
        r"^/shorts/([\w-]{6,})",
        r"^/embed/([\w-]{6,})",
        r"^/live/([\w-]{6,})",
        r"^/(\d{5,})",  # vimeo
        r"^/([\w-]{11})$",  # youtu.be short links
    ],
    instructions=(
        "This page is a single video. Video pages also list recommended, related "
        "and up-next videos in sidebars and end screens; ignore all of them. "
        "Extract the title, channel and description of the one video the URL "
        "points to."
    ),
    id_instructions=(
        "The primary video has the identifier \"{id}\". Only use metadata that "
        "belongs to this identifier."
    ),
)

SOCIAL_HINT = SiteHint(
    name="social",
    description="social media post",
    hosts=["twitter.com", "x.com", "instagram.com", "threads.net", "bsky.app",
           "mastodon.social", "linkedin.com", "facebook.com"],
    id_patterns=[r"/status/(\d+)", r"/p/([\w-]+)", r"/post/([\w-]+)", r"/posts/([\w-]+)"],
    instructions=(
        "This page is a single social media post. Ignore replies, suggested "
        "accounts, trending topics and other posts in the timeline. Use the "
        "post's own text and author."
    ),
    id_instructions="The primary post has the identifier \"{id}\".",
)

FORUM_HINT = SiteHint(
    name="forum",
    description="discussion forum thread",
    hosts=["reddit.com", "news.ycombinator.com", "stackoverflow.com",
           "stackexchange.com", "lobste.rs", "discourse.org"],
    id_query_param="id",
    id_patterns=[r"/comments/(\w+)", r"/questions/(\d+)", r"/s/(\w+)"],
    instructions=(
        "This page is a discussion thread. Describe the original submission "
        "(title, link, author). Ignore sidebar communities, related threads "
        "and individual comments unless the guidance asks for them."
    ),
    id_instructions="The thread identifier is \"{id}\".",
)

NEWS_HINT = SiteHint(
    name="news",
    description="news article",
    hosts=["nytimes.com", "bbc.co.uk", "bbc.com", "theguardian.com", "cnn.com",
           "reuters.com", "apnews.com", "washingtonpost.com", "bloomberg.com",
           "ft.com", "wsj.com", "theverge.com", "arstechnica.com"],
    instructions=(
        "This page is a news article. Use the headline, byline and publication "
        "date of the main article only. Ignore 'most read', 'related stories', "
        "newsletter prompts and other headlines listed around it."
    ),
)


class HintRegistry:
    """Registry of platform hints."""

    _hints: dict[str, SiteHint] = {
        "video": VIDEO_HINT,
        "social": SOCIAL_HINT,
        "forum": FORUM_HINT,
        "news": NEWS_HINT,
    }

    @classmethod
    def register(cls, hint: SiteHint) -> None:
        """Register a new hint."""
        cls._hints[hint.name] = hint

    @classmethod
    def get(cls, name: str) -> SiteHint | None:
        return cls._hints.get(name)

    @classmethod
    def list_hints(cls) -> list[SiteHint]:
        return list(cls._hints.values())

    @classmethod
    def detect(cls, url: str) -> SiteHint | None:
        """Hint for the platform serving ``url``, if it is a known one."""
        for hint in cls._hints.values():
            if hint.matches(url):
                return hint
        return None
