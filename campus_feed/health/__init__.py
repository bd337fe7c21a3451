from campus_feed.health.router import router


__all__ = ["router"]
