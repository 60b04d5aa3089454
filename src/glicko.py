"""

    Glicko-2 rating computations

    Copyright © 2025 Miðeind ehf.

    The Creative Commons Attribution-NonCommercial 4.0
    International Public License (CC-BY-NC 4.0) applies to this software.
    For further information, see https://github.com/mideind/Netskrafl

    This module implements glicko2_rating_period(), which updates
    a competitor's rating, rating deviation and volatility from all
    the games played within one rating period, as described in
    Mark E. Glickman's "Example of the Glicko-2 system" (2022).

    Ratings are kept on the familiar Glicko scale (1500 +/- 350)
    in the interface and converted to the internal Glicko-2 scale
    for the calculation.

"""

from __future__ import annotations

from typing import Sequence, Tuple

import math
from dataclasses import dataclass


# Conversion factor between the Glicko and the Glicko-2 scales
GLICKO2_SCALE: float = 400.0 / math.log(10.0)  # 173.7178...

DEFAULT_RATING: float = 1500.0
DEFAULT_DEVIATION: float = 350.0
DEFAULT_VOLATILITY: float = 0.06

# Game outcomes, from the point of view of the rated competitor
WIN: float = 1.0
DRAW: float = 0.5
LOSS: float = 0.0


@dataclass(frozen=True)
class Glicko2Rating:
    """A competitor's rating, rating deviation and volatility"""

    rating: float = DEFAULT_RATING
    deviation: float = DEFAULT_DEVIATION
    volatility: float = DEFAULT_VOLATILITY


@dataclass(frozen=True)
class Glicko2Config:
    """Parameters of the rating system"""

    # The system constant, constraining the change in volatility over time
    tau: float = 0.5
    # Convergence tolerance for the volatility iteration
    convergence_tolerance: float = 0.000_001


# A game result: the opponent's rating and the outcome (WIN, DRAW or LOSS)
GameResult = Tuple[Glicko2Rating, float]


def _g(phi: float) -> float:
    """Reduces the impact of a game as a function of
    the opponent's rating deviation"""
    return 1.0 / math.sqrt(1.0 + 3.0 * phi * phi / (math.pi * math.pi))


def _expected_score(mu: float, mu_j: float, g_j: float) -> float:
    return 1.0 / (1.0 + math.exp(-g_j * (mu - mu_j)))


def _new_volatility(
    sigma: float, phi: float, v: float, delta: float, config: Glicko2Config
) -> float:
    """Find the new volatility by the Illinois variant
    of the regula falsi method (step 5 in Glickman)"""
    tau = config.tau
    a = math.log(sigma * sigma)
    phi2 = phi * phi
    delta2 = delta * delta

    def f(x: float) -> float:
        ex = math.exp(x)
        return (ex * (delta2 - phi2 - v - ex)) / (
            2.0 * (phi2 + v + ex) ** 2
        ) - (x - a) / (tau * tau)

    big_a = a
    if delta2 > phi2 + v:
        big_b = math.log(delta2 - phi2 - v)
    else:
        k = 1
        while f(a - k * tau) < 0.0:
            k += 1
        big_b = a - k * tau

    f_a = f(big_a)
    f_b = f(big_b)
    while abs(big_b - big_a) > config.convergence_tolerance:
        big_c = big_a + (big_a - big_b) * f_a / (f_b - f_a)
        f_c = f(big_c)
        if f_c * f_b <= 0.0:
            big_a, f_a = big_b, f_b
        else:
            f_a /= 2.0
        big_b, f_b = big_c, f_c

    return math.exp(big_a / 2.0)


def glicko2_rating_period(
    player: Glicko2Rating,
    results: Sequence[GameResult],
    config: Glicko2Config = Glicko2Config(),
) -> Glicko2Rating:
    """Compute the player's new rating after a rating period,
    given the results of all games played in the period.
    All games are taken into account simultaneously."""
    mu = (player.rating - DEFAULT_RATING) / GLICKO2_SCALE
    phi = player.deviation / GLICKO2_SCALE
    sigma = player.volatility

    if not results:
        # No games played: the rating and volatility stay the same,
        # but the uncertainty about the rating grows
        new_phi = math.sqrt(phi * phi + sigma * sigma)
        return Glicko2Rating(
            rating=player.rating,
            deviation=new_phi * GLICKO2_SCALE,
            volatility=sigma,
        )

    # Estimated variance of the player's rating based on game outcomes
    # (v), and the sum used for the improvement in rating (delta / v)
    inv_v = 0.0
    score_sum = 0.0
    for opponent, outcome in results:
        mu_j = (opponent.rating - DEFAULT_RATING) / GLICKO2_SCALE
        g_j = _g(opponent.deviation / GLICKO2_SCALE)
        e_j = _expected_score(mu, mu_j, g_j)
        inv_v += g_j * g_j * e_j * (1.0 - e_j)
        score_sum += g_j * (outcome - e_j)

    v = 1.0 / inv_v
    delta = v * score_sum

    new_sigma = _new_volatility(sigma, phi, v, delta, config)

    # Pre-rating period deviation, then the new deviation and rating
    phi_star = math.sqrt(phi * phi + new_sigma * new_sigma)
    new_phi = 1.0 / math.sqrt(1.0 / (phi_star * phi_star) + 1.0 / v)
    new_mu = mu + new_phi * new_phi * score_sum

    return Glicko2Rating(
        rating=new_mu * GLICKO2_SCALE + DEFAULT_RATING,
        deviation=new_phi * GLICKO2_SCALE,
        volatility=new_sigma,
    )
