"""
로깅 모듈.

[ 역할 ]
    파일 + 콘솔 로거를 설정. 매매 체결, 주문 거절, 실행 요약 등을 기록.

[ 로그 파일 위치 ]
    {log_dir}/{name}_{YYYYMMDD}.log (예: logs/tradesim_20200925.log)

[ 로거 이름 ]
    tradesim.account   ← data/account.py (매수/매도 DEBUG, 거절 INFO)
    tradesim.strategy  ← core/trading_strategy.py
    tradesim.backtest  ← backtest/engine.py

[ 하위 로거 레벨 ]
    levels={"tradesim.account": "WARNING"} 처럼 넘기면 해당 하위 로거만
    레벨을 따로 둔다. config.yaml의 log_levels 섹션에서 온다.

[ 호출하는 곳 ]
    - run_backtest.py에서 setup_logger() 호출
"""

import logging
import sys
from datetime import datetime
from pathlib import Path


def setup_logger(
    name: str = "tradesim",
    level: str = "INFO",
    log_dir: str | None = "logs",
    console: bool = True,
    levels: dict[str, str] | None = None,
) -> logging.Logger:
    """로거 설정. 파일 핸들러(일별) + 콘솔 핸들러 등록. log_dir=None이면 파일 생략.

    levels의 하위 로거(예: tradesim.account)는 핸들러 없이 레벨만 지정하고
    기록은 부모 로거의 핸들러로 전달된다.
    """
    logger = logging.getLogger(name)
    logger.setLevel(getattr(logging, level.upper()))

    for child, child_level in (levels or {}).items():
        logging.getLogger(child).setLevel(getattr(logging, child_level.upper()))

    if logger.handlers:
        return logger

    formatter = logging.Formatter(
        "%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    # 파일 핸들러
    if log_dir is not None:
        log_path = Path(log_dir)
        log_path.mkdir(parents=True, exist_ok=True)
        today = datetime.now().strftime("%Y%m%d")
        file_handler = logging.FileHandler(
            log_path / f"{name}_{today}.log",
            encoding="utf-8",
        )
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    # 콘솔 핸들러
    if console:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setFormatter(formatter)
        logger.addHandler(console_handler)

    return logger
