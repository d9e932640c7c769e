from sqlalchemy.orm import declarative_base
import enum

Base = declarative_base()


# ============================================================================
# ENUMS
# ============================================================================

class ImportSourceType(str, enum.Enum):
    """Import source types"""
    WORDPRESS_REST = "wordpress_rest"
    CSV = "csv"


class ImportStatus(str, enum.Enum):
    """Import run status"""
    RUNNING = "running"
    SUCCESS = "success"
    FAILED = "failed"
    PARTIAL = "partial"
