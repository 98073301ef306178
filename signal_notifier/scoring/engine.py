"""
Three-indicator vote aggregation.

The total score is the plain sum of the three vote values and maps onto a
fixed five-bucket table:

    total  3      -> Strong Buy
    total  1, 2   -> Buy
    total  0      -> Hold
    total -1, -2  -> Sell
    total -3      -> Strong Sell

Indicator-specific entry/exit criteria live in the indicator provider; this
module only consumes the classified +1/0/-1 votes.
"""

from collections.abc import Sequence

from ..errors import ProviderError
from ..models.signals import IndicatorVote, SignalBucket, SignalResult, Vote

VOTES_PER_SIGNAL = 3

_BUCKETS_BY_TOTAL = {
    3: SignalBucket.STRONG_BUY,
    2: SignalBucket.BUY,
    1: SignalBucket.BUY,
    0: SignalBucket.HOLD,
    -1: SignalBucket.SELL,
    -2: SignalBucket.SELL,
    -3: SignalBucket.STRONG_SELL,
}


def bucket_for_total(total_score: int) -> SignalBucket:
    """
    Map a total vote score onto its signal bucket.

    Args:
        total_score: Sum of three vote values, in [-3, 3]

    Returns:
        The signal bucket for that total

    Raises:
        ValueError: If the total is outside [-3, 3]
    """
    try:
        return _BUCKETS_BY_TOTAL[total_score]
    except KeyError:
        raise ValueError(f"Total score out of range [-3, 3]: {total_score}") from None


def score(ticker: str, votes: Sequence[IndicatorVote]) -> SignalResult:
    """
    Aggregate exactly three indicator votes into a signal.

    Args:
        ticker: Ticker the votes were computed for
        votes: Three classified indicator votes

    Returns:
        SignalResult carrying the votes, their sum and the bucket

    Raises:
        ProviderError: If the votes are not exactly three valid votes
    """
    if len(votes) != VOTES_PER_SIGNAL:
        raise ProviderError(
            f"Expected {VOTES_PER_SIGNAL} indicator votes, got {len(votes)}",
            ticker=ticker,
            raw_output=list(votes)
        )

    normalized = tuple(_normalize_vote(ticker, vote) for vote in votes)
    total_score = sum(vote.vote.value for vote in normalized)

    return SignalResult(
        ticker=ticker,
        indicators=normalized,
        total_score=total_score,
        bucket=bucket_for_total(total_score),
    )


def _normalize_vote(ticker: str, vote: IndicatorVote) -> IndicatorVote:
    """Coerce a raw integer vote into a Vote member, rejecting anything else."""
    if not isinstance(vote, IndicatorVote) or not vote.name:
        raise ProviderError(
            f"Malformed indicator vote: {vote!r}",
            ticker=ticker,
            raw_output=vote
        )

    if isinstance(vote.vote, Vote):
        return vote

    # bool is an int subclass; True/False are not votes
    if isinstance(vote.vote, int) and not isinstance(vote.vote, bool):
        try:
            return IndicatorVote(name=vote.name, vote=Vote(vote.vote))
        except ValueError:
            pass

    raise ProviderError(
        f"Vote for {vote.name} must be Buy, Sell or Neutral, got {vote.vote!r}",
        ticker=ticker,
        raw_output=vote
    )
