"""
Payoff and time-decay projection for strategies.
"""
import logging
from typing import List, Optional, Tuple

from marketscope.exceptions import InvalidInputError
from marketscope.models import (
    LegProjection,
    Outcome,
    PayoffPoint,
    ScenarioCell,
    ScenarioGrid,
    Strategy,
    StrategyLeg,
    TimeDecayRow,
)

from .types import StrategyConfig

logger = logging.getLogger(__name__)


def clamp(value: float, low: float = 0.0, high: float = 1.0) -> float:
    return min(high, max(low, value))


class PayoffProjector:
    """
    Projects a strategy's value under assumed outcomes.

    The EV sweep moves the primary market's true probability from 0 to 1
    and drags every other leg's market along by the correlation weight.
    The time-decay projection converges each leg's YES price toward a
    belief with a half-life. The scenario grid settles the legs under each
    resolution of the primary and the first hedge market.
    """

    def __init__(self, config: Optional[StrategyConfig] = None):
        self.config = config or StrategyConfig()
        if self.config.ev_grid_step <= 0 or self.config.ev_grid_step > 1:
            raise InvalidInputError(f"ev_grid_step must be in (0, 1], got {self.config.ev_grid_step}")

    def grid(self) -> List[float]:
        steps = max(1, int(round(1 / self.config.ev_grid_step)))
        return [i / steps for i in range(steps + 1)]

    def adjusted_probability(self, strategy: Strategy, leg: StrategyLeg, p_true: float) -> float:
        """Probability of the leg's market resolving YES when the primary's is p_true."""
        if leg.market == strategy.primary_market:
            return p_true
        shift = (p_true - strategy.primary_yes_mid) * strategy.correlation_weight
        return clamp(leg.market_yes_mid + shift)

    @staticmethod
    def leg_expected_value(leg: StrategyLeg, p_yes: float) -> float:
        """Expected profit of a leg when its market resolves YES with probability p_yes."""
        p_win = p_yes if leg.outcome == Outcome.YES else 1 - p_yes
        ev = leg.size * (p_win * (1 - leg.price) + (1 - p_win) * -leg.price)
        return leg.sign * ev

    def payoff_curve(self, strategy: Strategy) -> Tuple[PayoffPoint, ...]:
        points = []
        for p_true in self.grid():
            total = sum(
                self.leg_expected_value(leg, self.adjusted_probability(strategy, leg, p_true))
                for leg in strategy.legs
            )
            points.append(PayoffPoint(p_true=p_true, ev=total))
        return tuple(points)

    @staticmethod
    def settlement_pnl(leg: StrategyLeg, resolves_yes: bool) -> float:
        """Profit of a leg held to resolution."""
        won = (leg.outcome == Outcome.YES) == resolves_yes
        pnl = leg.size * (1 - leg.price) if won else -leg.size * leg.price
        return leg.sign * pnl

    def scenario_grid(self, strategy: Strategy) -> Optional[ScenarioGrid]:
        """
        Settlement P&L for each way the primary and the first hedge market can resolve.

        The hedge market is the first leg's market other than the primary.
        YES probabilities are the markets' mids, taken as independent. Legs on
        any further market contribute their expected value at their own mid.
        Without a hedge market the grid has the two primary outcomes only.

        Returns:
            ScenarioGrid with max_risk (worst cell) and expected_return
            (probability-weighted P&L), or None for a strategy without legs
        """
        if strategy.is_empty:
            return None

        primary = strategy.primary_market
        hedge_market = next((leg.market for leg in strategy.legs if leg.market != primary), None)
        hedge_yes = next(
            (leg.market_yes_mid for leg in strategy.legs if leg.market == hedge_market), None
        )
        other_ev = sum(
            self.leg_expected_value(leg, leg.market_yes_mid)
            for leg in strategy.legs
            if leg.market not in (primary, hedge_market)
        )

        def _pnl(primary_yes: bool, hedge_yes_resolves: Optional[bool]) -> float:
            total = other_ev
            for leg in strategy.legs:
                if leg.market == primary:
                    total += self.settlement_pnl(leg, primary_yes)
                elif leg.market == hedge_market:
                    total += self.settlement_pnl(leg, hedge_yes_resolves)
            return total

        p = strategy.primary_yes_mid
        hedge_cases = [None] if hedge_market is None else [True, False]
        cells = []
        for primary_yes in (True, False):
            for hedge_case in hedge_cases:
                probability = p if primary_yes else 1 - p
                if hedge_case is not None:
                    probability *= hedge_yes if hedge_case else 1 - hedge_yes
                cells.append(ScenarioCell(
                    primary_outcome=Outcome.YES if primary_yes else Outcome.NO,
                    hedge_outcome=None if hedge_case is None else (Outcome.YES if hedge_case else Outcome.NO),
                    probability=probability,
                    pnl=_pnl(primary_yes, hedge_case),
                ))

        return ScenarioGrid(
            hedge_market=hedge_market,
            cells=tuple(cells),
            max_risk=min(c.pnl for c in cells),
            expected_return=sum(c.pnl * c.probability for c in cells),
        )

    def time_decay(
        self,
        strategy: Strategy,
        belief: float,
        half_life_days: float
    ) -> Tuple[TimeDecayRow, ...]:
        """
        Mark-to-market at each horizon if prices converge toward belief.

        expected_price on each LegProjection is the price of the leg's outcome
        (1 - YES price for NO legs).

        Raises:
            InvalidInputError: If half_life_days is not positive
        """
        if half_life_days <= 0:
            raise InvalidInputError(f"half_life_days must be positive, got {half_life_days}")

        target = clamp(belief)
        rows = []
        for days in self.config.time_decay_horizons:
            multiplier = 2 ** (-days / half_life_days)
            projections = []
            for leg in strategy.legs:
                mid = leg.market_yes_mid
                expected_yes = target + (mid - target) * multiplier
                move = expected_yes - mid
                if leg.outcome == Outcome.YES:
                    expected_price, mtm = expected_yes, leg.size * move
                else:
                    expected_price, mtm = 1 - expected_yes, -leg.size * move
                projections.append(LegProjection(
                    market=leg.market,
                    outcome=leg.outcome,
                    expected_price=expected_price,
                    mark_to_market=leg.sign * mtm,
                ))
            rows.append(TimeDecayRow(days=days, multiplier=multiplier, legs=tuple(projections)))
        return tuple(rows)

    def project(self, strategy: Strategy, belief: float, half_life_days: float) -> Strategy:
        """Return a copy of the strategy carrying its payoff curve, time-decay rows and scenario grid."""
        if strategy.is_empty:
            logger.debug(f"Nothing to project for {strategy.primary_market}: no legs")
            return strategy
        return strategy.model_copy(update={
            "payoff_curve": self.payoff_curve(strategy),
            "time_decay": self.time_decay(strategy, belief, half_life_days),
            "scenario_grid": self.scenario_grid(strategy),
        })
