from taskboard.core.config import settings


def isDebugMode() -> bool:
    return settings.MODE == "debug"


def isTestMode() -> bool:
    return settings.MODE == "test"
