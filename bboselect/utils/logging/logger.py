import logging


logger = logging.getLogger("BBO")
logger.setLevel(logging.INFO)
if not logger.handlers:  # Only add handler if none exist
    ch = logging.StreamHandler()
    formatter = logging.Formatter('%(asctime)s - %(levelname)s - %(message)s')
    ch.setFormatter(formatter)
    logger.addHandler(ch)


def set_verbosity(verbose=True):
    """Switch the BBO logger between INFO and DEBUG (retry level detail)."""
    logger.setLevel(logging.DEBUG if verbose else logging.INFO)
    return logger
