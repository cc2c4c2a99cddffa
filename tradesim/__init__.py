"""
=============================================================================
주식 매매 시뮬레이션 엔진 (tradesim)
=============================================================================

[ 시스템 전체 구조 ]

    run_backtest.py (진입점)
         │
         ├── utils/config.py        ← config.yaml 설정 로드
         ├── utils/logger.py        ← 로깅
         │
         ├── data/market_data.py    ← DataFrame → 캔들 시퀀스
         │
         └── backtest/engine.py     ← 종목별 실행 엔진
               │
               ├── strategies/            ← 매매 전략 (캔들마다 진입/청산 판단)
               │     └── sma_crossover.py
               ├── indicators/            ← 스트리밍 이동평균
               ├── data/account.py        ← 포지션 생애주기/거래기록
               ├── brokers/               ← 자본/결제 모델
               └── backtest/metrics.py    ← 성과 지표 계산


[ 핵심 추상 클래스 (core/) - 모든 구현체의 부모 ]

    core/broker_api.py       → brokers/immediate_broker.py  (즉시 결제)
                             → brokers/settlement_broker.py (T+2 결제 + 수수료)

    core/data_provider.py    → data/market_data.py::DataFrameProvider

    core/trading_strategy.py → strategies/sma_crossover.py


[ 데이터 흐름 ]

    1. config.yaml에서 초기 자본, 브로커 종류, 전략 파라미터 로드
    2. PriceSource가 시간 오름차순 캔들 시퀀스 제공
    3. 전략이 캔들 종가를 SMA에 넣고 진입/청산 판단
    4. 시그널 발생 시 Account가 Broker로 자본 검증/결제 후 Position 기록
    5. metrics.py가 포지션 기록으로 승/패/수익 계산


[ 불변 조건 ]

    - 계좌당 열린 포지션은 최대 1개
    - 주문은 정규장(평일 09:30 ~ 16:00)에서만 체결
    - 같은 캔들 + 같은 초기 자본 + 같은 파라미터 → 같은 거래 기록 (결정적)
"""
