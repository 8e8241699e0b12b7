# subwriter/utils.py
import logging

logger = logging.getLogger("subwriter")

def setup_logging(verbose: bool):
    """Configure logging with verbose option."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(format="%(asctime)s %(name)s %(levelname)s: %(message)s", level=level, force=True)

def normalize(name: str) -> str:
    """Normalize a hostname by stripping, lowercasing and dropping the trailing dot."""
    if not name:
        return name
    name = name.strip().lower()
    if name.endswith('.'):
        name = name[:-1]
    return name
