"""Repository topic to hashtag conversion."""

# Topics whose conventional spelling PascalCase would get wrong
BRAND_HASHTAGS = {
    "typescript": "TypeScript",
    "javascript": "JavaScript",
    "nodejs": "NodeJS",
    "github": "GitHub",
    "webassembly": "WebAssembly",
    "postgresql": "PostgreSQL",
    "mongodb": "MongoDB",
    "graphql": "GraphQL",
}


def topic_to_hashtag(topic: str) -> str:
    """Convert a GitHub topic into a hashtag.

    Known brands use their canonical spelling; anything else becomes
    PascalCase over hyphen-separated segments, e.g. ``bluesky-client``
    becomes ``#BlueskyClient``.

    Args:
        topic: A GitHub repository topic.

    Returns:
        The hashtag, including the leading ``#``.
    """
    brand = BRAND_HASHTAGS.get(topic.lower())
    if brand:
        return f"#{brand}"
    return "#" + "".join(word[:1].upper() + word[1:] for word in topic.split("-"))


def topics_to_hashtags(topics: list[str]) -> list[str]:
    """Convert topics to hashtags, dropping empty topics and duplicates."""
    hashtags = []
    for topic in topics:
        topic = topic.strip()
        if not topic:
            continue
        hashtag = topic_to_hashtag(topic)
        if hashtag not in hashtags:
            hashtags.append(hashtag)
    return hashtags
