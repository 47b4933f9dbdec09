"""표준화된 로거 모듈.

패키지 전체에서 일관된 로깅 형식을 제공합니다.
"""

import logging
import sys

LOG_FORMAT = "[%(asctime)s] %(levelname)s [%(name)s] %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def get_logger(name: str) -> logging.Logger:
    """표준화된 로거를 반환합니다.

    Args:
        name: 로거 이름 (일반적으로 __name__ 사용).

    Returns:
        stdout 핸들러가 연결된 로거 인스턴스.
    """
    logger = logging.getLogger(name)

    if not logger.handlers:
        logger.setLevel(logging.INFO)

        handler = logging.StreamHandler(sys.stdout)
        handler.setLevel(logging.DEBUG)
        handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT))
        logger.addHandler(handler)

    return logger
