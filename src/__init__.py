"""markmedia — favicon and screenshot caching for bookmarked links."""
