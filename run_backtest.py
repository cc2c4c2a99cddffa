"""
백테스트 실행 스크립트 (시스템 진입점).

[ 사용법 ]
    # 기본 실행 (config.yaml의 전략/브로커 사용, 샘플 분봉 데이터)
    python run_backtest.py

    # 종목 지정
    python run_backtest.py --tickers AAPL MSFT

    # 브로커 지정 (즉시 결제 / T+2 결제)
    python run_backtest.py --broker immediate

    # 파라미터 오버라이드
    python run_backtest.py -p window=20

    # CSV 분봉 데이터 사용 (columns: timestamp, open, high, low, close, volume)
    python run_backtest.py --csv AAPL=data/aapl_1min.csv

    # 등록된 전략 목록 확인
    python run_backtest.py --list
"""

import argparse
import zlib
from datetime import date
from pathlib import Path

import numpy as np
import pandas as pd

from tradesim.backtest.engine import BROKER_KINDS, BacktestEngine, BacktestResult
from tradesim.data.market_data import DataFrameProvider
from tradesim.strategies import list_strategies
from tradesim.utils.config import Config
from tradesim.utils.logger import setup_logger


def generate_sample_data(
    ticker: str,
    start_date: date,
    end_date: date,
    initial_price: float = 100.0,
    volatility: float = 0.001,
) -> pd.DataFrame:
    """백테스트용 샘플 1분봉 데이터 생성 (평일 09:30 ~ 15:59).

    종목 코드로 시드를 고정하므로 같은 입력이면 항상 같은 데이터가 나온다.
    """
    rng = np.random.default_rng(zlib.crc32(ticker.encode("utf-8")))

    timestamps = []
    for day in pd.bdate_range(start=start_date, end=end_date):
        session = pd.date_range(
            start=day + pd.Timedelta(hours=9, minutes=30),
            periods=390,
            freq="1min",
        )
        timestamps.extend(session)

    n = len(timestamps)
    if n == 0:
        return pd.DataFrame(columns=["timestamp", "open", "high", "low", "close", "volume"])

    returns = rng.normal(0.0, volatility, n)
    closes = initial_price * np.cumprod(1 + returns)
    opens = closes * (1 + rng.normal(0, volatility / 2, n))
    highs = np.maximum(opens, closes) * (1 + np.abs(rng.normal(0, volatility / 2, n)))
    lows = np.minimum(opens, closes) * (1 - np.abs(rng.normal(0, volatility / 2, n)))
    volumes = rng.lognormal(8, 1, n).astype(int)

    return pd.DataFrame({
        "timestamp": timestamps,
        "open": np.round(opens, 4),
        "high": np.round(highs, 4),
        "low": np.round(lows, 4),
        "close": np.round(closes, 4),
        "volume": volumes,
    })


def parse_param(param_str: str) -> tuple[str, object]:
    """'key=value' 문자열을 파싱하여 (key, value) 반환. 숫자면 자동 변환."""
    key, _, value = param_str.partition("=")
    key = key.strip()
    value = value.strip()

    # 숫자 자동 변환
    try:
        if "." in value:
            return key, float(value)
        return key, int(value)
    except ValueError:
        # bool 변환
        if value.lower() in ("true", "yes"):
            return key, True
        if value.lower() in ("false", "no"):
            return key, False
        return key, value


def load_data(config: Config, tickers: list[str], csv_paths: dict[str, str]) -> DataFrameProvider:
    """CSV 또는 샘플 데이터를 DataFrameProvider에 로드."""
    start = date.fromisoformat(config.backtest.start_date)
    end = date.fromisoformat(config.backtest.end_date)
    provider = DataFrameProvider()

    for ticker in tickers:
        if ticker in csv_paths:
            df = pd.read_csv(csv_paths[ticker])
            print(f"  {ticker}: CSV {csv_paths[ticker]} ({len(df)}개 캔들)")
        else:
            df = generate_sample_data(ticker, start, end)
            print(f"  {ticker}: 샘플 {len(df)}개 캔들")
        provider.load_data(ticker, df)

    return provider


def print_result(result: BacktestResult, verbose: bool) -> None:
    """종목별 결과 출력."""
    if verbose:
        for position in result.positions:
            print(f"  {position}")
    print(f"{result.ticker:6}-- {result.metrics.summary()}")


def main():
    parser = argparse.ArgumentParser(description="SMA 돌파 전략 백테스트 실행")
    parser.add_argument("--config", type=str, default="config.yaml", help="설정 파일 경로")
    parser.add_argument("--strategy", type=str, default=None, help="전략 이름 (config.yaml 대신 지정)")
    parser.add_argument("-p", "--param", action="append", default=[], help="파라미터 오버라이드 (예: -p window=20)")
    parser.add_argument("--tickers", nargs="+", default=None, help="종목 코드 (config.yaml 대신 지정)")
    parser.add_argument("--broker", type=str, default=None, choices=BROKER_KINDS, help="브로커 종류")
    parser.add_argument("--csv", action="append", default=[], metavar="TICKER=PATH", help="종목별 CSV 분봉 파일")
    parser.add_argument("-v", "--verbose", action="store_true", help="포지션별 상세 출력")
    parser.add_argument("--list", action="store_true", help="등록된 전략 목록 출력")
    args = parser.parse_args()

    # 전략 목록 출력
    if args.list:
        print("등록된 전략:")
        for name in list_strategies():
            print(f"  - {name}")
        return

    # 설정 로드
    config_path = Path(args.config)
    if config_path.exists():
        config = Config.from_yaml(config_path)
    else:
        print(f"설정 파일 없음: {config_path}, 기본값 사용")
        config = Config()

    setup_logger(level=config.log_level, log_dir=config.log_dir, levels=config.log_levels)

    strategy_name = args.strategy or config.strategy.name
    strategy_params = dict(config.strategy.params)
    for p in args.param:
        key, value = parse_param(p)
        strategy_params[key] = value

    csv_paths = {k.upper(): v for k, _, v in (item.partition("=") for item in args.csv)}
    tickers = [t.upper() for t in (args.tickers or config.strategy.tickers or ["ABC"])]
    tickers += [t for t in csv_paths if t not in tickers]

    print(f"\n전략: {strategy_name} {strategy_params}")
    print("데이터 로드 중...")
    provider = load_data(config, tickers, csv_paths)

    engine = BacktestEngine(
        initial_capital=config.backtest.initial_capital,
        broker=args.broker or config.backtest.broker,
        commission=config.backtest.commission,
    )

    start = date.fromisoformat(config.backtest.start_date)
    end = date.fromisoformat(config.backtest.end_date)
    data = {ticker: provider.history(ticker, start, end) for ticker in tickers}

    print(f"\n[{engine.broker} 브로커, 초기 자본 ${engine.initial_capital:,.2f}]")
    for result in engine.run_many(data, strategy_name, strategy_params).values():
        print_result(result, args.verbose)


if __name__ == "__main__":
    main()
