"""
StockPulse — Bar Resampler
Aggregates chronological 1-minute bars into fixed-count buckets.

A bucket is exactly `bucket_size` consecutive source bars (the trailing chunk
may be shorter). Output is capped at `max_points` buckets; when enough data
exists the most recent `max_points * bucket_size` bars are used so every
bucket is full. Labels are the first bar's time floored to the bucket
boundary, strictly increasing.
"""
from datetime import datetime
from typing import List

import numpy as np
import pandas as pd

from stockpulse.config.settings import get_settings
from stockpulse.data.models import Bar, ChartSeries
from stockpulse.utils.logger import get_logger

logger = get_logger("resampler")

PRICE_COLUMNS = ["open", "high", "low", "close"]


def bars_to_dataframe(bars: List[Bar]) -> pd.DataFrame:
    """Bars as a DataFrame with invalid rows (non-finite or non-positive OHLC) removed."""
    if not bars:
        return pd.DataFrame(columns=["time", *PRICE_COLUMNS, "volume"])
    df = pd.DataFrame([b.model_dump() for b in bars])
    prices = df[PRICE_COLUMNS].apply(pd.to_numeric, errors="coerce").to_numpy(dtype=float)
    valid = np.isfinite(prices).all(axis=1) & (prices > 0).all(axis=1)
    return df.loc[valid].reset_index(drop=True)


def bucket_label(first_time: datetime, bucket_size: int) -> pd.Timestamp:
    return pd.Timestamp(first_time).floor(f"{bucket_size}min")


class BarResampler:
    """Fine-to-coarse OHLCV aggregation for the three chart resolutions."""

    def __init__(self, max_points: int = None):
        settings = get_settings().analysis
        self.max_points = max_points or settings.max_chart_points
        self.fine_bucket = settings.fine_bucket
        self.medium_bucket = settings.medium_bucket
        self.coarse_bucket = settings.coarse_bucket

    def aggregate(self, bars: List[Bar], bucket_size: int) -> List[Bar]:
        if bucket_size < 1:
            raise ValueError(f"bucket_size must be >= 1, got {bucket_size}")

        df = bars_to_dataframe(bars)
        if df.empty:
            return []

        df = df.tail(self.max_points * bucket_size).reset_index(drop=True)
        if len(df) < self.max_points * bucket_size:
            logger.debug(
                "resample_shortfall",
                bucket_size=bucket_size,
                source_bars=len(df),
                buckets=-(-len(df) // bucket_size),
                wanted=self.max_points,
            )

        groups = df.groupby(np.arange(len(df)) // bucket_size, sort=True)
        agg = groups.agg(
            time=("time", "first"),
            open=("open", "first"),
            high=("high", "max"),
            low=("low", "min"),
            close=("close", "last"),
            volume=("volume", "sum"),
        )

        result: List[Bar] = []
        previous = None
        for row in agg.itertuples(index=False):
            label = bucket_label(row.time, bucket_size)
            if previous is not None and label <= previous:
                # Gap in the source data; the floored label would repeat
                label = pd.Timestamp(row.time)
            previous = label
            result.append(
                Bar(
                    time=label.to_pydatetime(),
                    open=float(row.open),
                    high=float(row.high),
                    low=float(row.low),
                    close=float(row.close),
                    volume=int(row.volume),
                )
            )
        return result

    def resample(self, fine_bars: List[Bar]) -> ChartSeries:
        return ChartSeries(
            one_minute=self.aggregate(fine_bars, self.fine_bucket),
            fifteen_minute=self.aggregate(fine_bars, self.medium_bucket),
            one_hour=self.aggregate(fine_bars, self.coarse_bucket),
        )
