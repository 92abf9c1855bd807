"""Prompt templates for the confidence oracle, one context block per strategy."""

from autotrader.models import MarketTrend, Opportunity, TradeSide

INSTRUCTIONS = (
    "Provide a confidence score from 0.0 to 1.0 for this trade. A score of 1.0 "
    "represents maximum confidence. Return ONLY the numeric score, enclosed within "
    "<score> tags (e.g., <score>0.85</score>). You may also provide additional "
    "explanatory text outside these tags."
)

STRATEGY_CONTEXT = {
    "pullback": (
        "The strategy buys tokens in a temporary pullback to a key support level "
        "(the 20-period EMA) within the broader market trend. The current price "
        "is near this EMA, suggesting a potential bounce."
    ),
    "mean_reversion": (
        "The market is moving sideways. The strategy buys oversold tokens "
        "(RSI below 30) trading at or below the lower Bollinger Band, expecting "
        "a reversion to the mean."
    ),
    "downtrend": (
        "The market is in a downtrend. The strategy buys deeply discounted "
        "tokens trading more than 5% below their 200-period EMA with RSI "
        "below 30, expecting a relief bounce."
    ),
    "intraday": (
        "Intraday strategy on a short timeframe: the MACD line has crossed "
        "above its signal line while ATR shows the market is active."
    ),
    "momentum": (
        "Momentum strategy: the token gained more than 5% in the last hour on "
        "a volume spike and is trending or among the top gainers."
    ),
    "memecoin": (
        "Speculative meme-coin strategy: a newly trending, low-priced DEX pair "
        "with sufficient liquidity."
    ),
    "rebalance": (
        "Portfolio rebalancing: this trade moves the holding back toward its "
        "target allocation."
    ),
}


def _format_value(value: object) -> str:
    if isinstance(value, float):
        return f"{value:.4f}"
    return str(value)


def build_prompt(candidate: Opportunity, market_trend: MarketTrend | str) -> str:
    """Render the oracle prompt for one candidate trade."""
    trend = market_trend.value if isinstance(market_trend, MarketTrend) else market_trend
    side = "BUY" if candidate.side == TradeSide.BUY else "SELL"
    context = STRATEGY_CONTEXT.get(candidate.strategy, "")

    lines = [
        f"Analyze the following trade opportunity for a {side} trade.",
        INSTRUCTIONS,
        "",
        "Strategy Context:",
        f"- The overall market trend is currently determined to be: {trend}.",
        f"- Strategy: {candidate.strategy}. {context}".rstrip(),
        "",
        "Token Details:",
        f"- Symbol: {candidate.symbol.upper()}",
        f"- Current Price: {candidate.price:.4f}",
    ]
    if candidate.amount_usd is not None:
        lines.append(f"- Trade Size (USD): {candidate.amount_usd:.2f}")
    for name, value in candidate.indicators.items():
        if value is None:
            continue
        lines.append(f"- {name}: {_format_value(value)}")
    lines += ["", "Based on this information, what is your confidence in this trade?"]
    return "\n".join(lines)
