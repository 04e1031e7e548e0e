from __future__ import annotations

import logging
import math
import random
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence

from .constants import (
    AUTO_ADVANCE_ROUNDS,
    BASE_COINS,
    BOSS_COIN_FACTOR,
    COINS_PER_LEVEL,
    FEVER_MULTIPLIER,
    PERK_OPTION_COUNT,
    ROUNDS_PER_LEVEL,
)
from .enums import SessionPhase
from .events import (
    AnswerChecked,
    CellSelected,
    ChallengeReady,
    CoinsAwarded,
    GameOver,
    LevelCompleted,
    NextRound,
    PerkChosen,
    PerkOptionsOffered,
    PhaseChanged,
    Restart,
    SequenceSelected,
    StartLevel,
    TimeBonus,
    TimePenalty,
)
from .input_queue import EventQueue, InputQueue
from .level_config import get_level_config
from .managers import ComboManager
from .models import ChallengeData, LevelConfig
from .perks import PerkConfig, PerkManager
from .rules import check_answer, generate_challenge
from .storage import SaveStore
from .timers import PausableCountdown

logger = logging.getLogger(__name__)


@dataclass
class SessionTuning:
    base_coins: int = BASE_COINS
    coins_per_level: int = COINS_PER_LEVEL
    boss_coin_factor: int = BOSS_COIN_FACTOR
    fever_multiplier: float = FEVER_MULTIPLIER
    perk_option_count: int = PERK_OPTION_COUNT
    auto_advance_rounds: bool = AUTO_ADVANCE_ROUNDS

    @classmethod
    def from_cfg(cls, cfg: Dict[str, Any]) -> "SessionTuning":
        s = cfg.get("session", {}) or {}
        return cls(
            base_coins=int(s.get("base_coins", BASE_COINS)),
            coins_per_level=int(s.get("coins_per_level", COINS_PER_LEVEL)),
            boss_coin_factor=int(s.get("boss_coin_factor", BOSS_COIN_FACTOR)),
            fever_multiplier=float(s.get("fever_multiplier", FEVER_MULTIPLIER)),
            perk_option_count=int(s.get("perk_option_count", PERK_OPTION_COUNT)),
            auto_advance_rounds=bool(s.get("auto_advance_rounds", AUTO_ADVANCE_ROUNDS)),
        )


@dataclass
class SessionState:
    current_level: int = 1
    current_round: int = 1
    rounds_completed_this_level: int = 0
    global_time: float = 0.0
    mistakes_this_level: int = 0
    total_mistakes: int = 0
    coins_earned: int = 0
    phase: Optional[SessionPhase] = None


@dataclass(frozen=True)
class SessionSnapshot:
    time: float
    combo: int
    level: int
    round: int
    is_fever: bool
    boss_stages_remaining: int
    phase: SessionPhase
    coins_earned: int


class GameSession:
    """One run: levels of three rounds under a shared countdown.

    The presentation layer feeds signals through ``handle()`` (or an
    ``InputQueue`` via ``update()``), advances time with ``tick()`` and reads
    ``snapshot()``, ``challenge`` and ``drain_events()``.
    """

    def __init__(
        self,
        store: Optional[SaveStore] = None,
        combo: Optional[ComboManager] = None,
        perks: Optional[PerkManager] = None,
        *,
        tuning: Optional[SessionTuning] = None,
        rng=None,
        events: Optional[EventQueue] = None,
    ) -> None:
        self.events = events if events is not None else EventQueue()
        self.store = store if store is not None else SaveStore()
        self.combo = combo if combo is not None else ComboManager(self.events)
        self.perks = perks if perks is not None else PerkManager(self.events)
        self.tuning = tuning or SessionTuning()
        self.rng = rng or random

        self.countdown = PausableCountdown()
        self.state = SessionState()
        self.level_cfg: Optional[LevelConfig] = None
        self.challenge: Optional[ChallengeData] = None
        self.offered_perks: List[PerkConfig] = []
        self.restart()

    # ---- Run lifecycle ----

    def restart(self) -> None:
        self.combo.reset()
        self.perks.reset()
        self.countdown = PausableCountdown()
        self.state = SessionState()
        self.challenge = None
        self.offered_perks = []

        self.countdown.set(self.store.get_initial_time() + self.perks.initial_time_bonus())
        self._sync_time()
        logger.info("new run with %.1fs on the clock", self.countdown.get())
        self._enter_level(1)

    def _enter_level(self, level: int) -> None:
        st = self.state
        st.current_level = level
        st.current_round = 1
        st.rounds_completed_this_level = 0
        st.mistakes_this_level = 0
        self.challenge = None
        self.level_cfg = get_level_config(level, self.rng)
        self.countdown.stop()
        logger.info(
            "level %d (%s, boss=%s)", level, self.level_cfg.rounds[0].rule_type.value, self.level_cfg.is_boss
        )
        self._set_phase(SessionPhase.LEVEL_INTRO)

    def _set_phase(self, phase: SessionPhase) -> None:
        previous = self.state.phase
        if previous is phase:
            return
        self.state.phase = phase
        self.events.push(PhaseChanged(previous, phase))

    @property
    def phase(self) -> SessionPhase:
        return self.state.phase

    @property
    def is_over(self) -> bool:
        return self.state.phase is SessionPhase.GAME_OVER

    # ---- Clock ----

    def _sync_time(self) -> None:
        self.state.global_time = self.countdown.get()

    def _add_time(self, seconds: float) -> None:
        if seconds:
            self.countdown.add(seconds)
            self._sync_time()

    def tick(self, dt: float) -> None:
        if self.state.phase is not SessionPhase.ROUND_ACTIVE:
            return
        self.countdown.tick(dt)
        self._sync_time()
        if self.countdown.expired():
            self._game_over()

    # ---- Signals ----

    def handle(self, signal) -> None:
        if isinstance(signal, Restart):
            self.restart()
            return
        if self.is_over:
            logger.debug("run is over, ignoring %r", signal)
            return
        if isinstance(signal, StartLevel):
            self.start_level()
        elif isinstance(signal, NextRound):
            self.next_round()
        elif isinstance(signal, CellSelected):
            self.select_cell(signal.index)
        elif isinstance(signal, SequenceSelected):
            self.select_sequence(signal.indices)
        elif isinstance(signal, PerkChosen):
            self.choose_perk(signal.perk)
        else:
            logger.debug("unknown signal %r", signal)

    def update(self, iq: InputQueue, dt: float = 0.0) -> None:
        # answers queued before this tick are resolved before time runs
        for signal in iq.pop_all():
            self.handle(signal)
        self.tick(dt)

    def drain_events(self) -> List[Any]:
        seen: List[EventQueue] = []
        out: List[Any] = []
        for queue in (self.events, self.combo.events, self.perks.events):
            if any(queue is q for q in seen):
                continue
            seen.append(queue)
            out.extend(queue.pop_all())
        return out

    # ---- Rounds ----

    def start_level(self) -> None:
        if self.state.phase is not SessionPhase.LEVEL_INTRO:
            logger.debug("start_level ignored in %s", self.state.phase)
            return
        self._begin_round()

    def next_round(self) -> None:
        if self.state.phase is not SessionPhase.ROUND_RESOLVED:
            logger.debug("next_round ignored in %s", self.state.phase)
            return
        self._begin_round()

    def _begin_round(self) -> None:
        st = self.state
        round_cfg = self.level_cfg.rounds[st.rounds_completed_this_level]
        st.current_round = round_cfg.round_number
        self.challenge = generate_challenge(round_cfg, self.perks.hide_wrong_count(), rng=self.rng)
        self.events.push(ChallengeReady(st.current_level, st.current_round, round_cfg.boss_stage))
        self.countdown.resume()
        self._set_phase(SessionPhase.ROUND_ACTIVE)

    def select_cell(self, index: int) -> Optional[bool]:
        if not self._accepting_answers():
            return None
        if self.challenge.multi_select:
            logger.debug("single cell sent to a multi-select challenge")
            return None
        return self._resolve(int(index))

    def select_sequence(self, indices: Sequence[int]) -> Optional[bool]:
        if not self._accepting_answers():
            return None
        if not self.challenge.multi_select:
            logger.debug("sequence sent to a single-cell challenge")
            return None
        return self._resolve([int(i) for i in indices])

    def _accepting_answers(self) -> bool:
        if self.state.phase is not SessionPhase.ROUND_ACTIVE or self.challenge is None:
            logger.debug("answer ignored in %s", self.state.phase)
            return False
        return True

    def _resolve(self, user_input) -> bool:
        correct = check_answer(self.challenge.rule_type, user_input, self.challenge)
        self.events.push(AnswerChecked(correct))
        if correct:
            self._on_correct()
        else:
            self._on_wrong()
        return correct

    def _on_correct(self) -> None:
        st = self.state
        self.combo.add_combo()
        self.countdown.stop()
        st.rounds_completed_this_level += 1

        if st.rounds_completed_this_level >= ROUNDS_PER_LEVEL:
            self._complete_level()
        elif self.level_cfg.is_boss:
            # next boss stage starts straight away
            self._begin_round()
        else:
            self._set_phase(SessionPhase.ROUND_RESOLVED)
            if self.tuning.auto_advance_rounds:
                self._begin_round()

    def _on_wrong(self) -> None:
        if self.perks.can_use_shield():
            self.perks.use_shield()
            return
        st = self.state
        penalty = self.store.get_penalty_time()
        self._add_time(-penalty)
        st.mistakes_this_level += 1
        st.total_mistakes += 1
        self.events.push(TimePenalty(penalty))
        self.combo.reset_combo()
        if self.countdown.expired():
            self._game_over()

    # ---- Level end ----

    def base_coins(self, level: int) -> int:
        coins = self.tuning.base_coins + self.tuning.coins_per_level * level
        if self.level_cfg is not None and self.level_cfg.level == level and self.level_cfg.is_boss:
            coins *= self.tuning.boss_coin_factor
        return coins

    def level_coins(self, level: int, coin_bonus: float = 0.0) -> int:
        multiplier = (
            self.combo.coin_multiplier
            * self.perks.coin_multiplier()
            * self.store.get_coin_multiplier()
            * (1.0 + coin_bonus)
        )
        fever = self.tuning.fever_multiplier if self.combo.is_fever else 1.0
        # rounding first keeps 23.999999 style float noise from losing a coin
        return int(math.floor(round(self.base_coins(level) * multiplier * fever, 6)))

    def _complete_level(self) -> None:
        st = self.state
        level = st.current_level
        self._set_phase(SessionPhase.LEVEL_COMPLETE)
        self.challenge = None

        perfect = st.mistakes_this_level == 0
        self._add_time(self.level_cfg.bonus_time)
        bonus = self.perks.on_level_end(perfect)
        self._add_time(bonus.time_bonus)
        self.events.push(TimeBonus(self.level_cfg.bonus_time + bonus.time_bonus))

        coins = self.level_coins(level, bonus.coin_bonus)
        self._award_coins(coins, level)
        self.events.push(LevelCompleted(level, perfect, coins, self.level_cfg.bonus_time + bonus.time_bonus))
        logger.info("level %d complete (perfect=%s, coins=%d)", level, perfect, coins)

        if self.level_cfg.is_boss:
            self.offered_perks = self.perks.generate_perk_options(self.tuning.perk_option_count, self.rng)
            self.events.push(PerkOptionsOffered(tuple(p.type.value for p in self.offered_perks)))
            self._set_phase(SessionPhase.PERK_SELECTION)
        else:
            self._enter_level(level + 1)

    def _award_coins(self, coins: int, level: int) -> None:
        if coins <= 0:
            return
        self.store.add_coins(coins)
        self.state.coins_earned += coins
        self.events.push(CoinsAwarded(coins, level))

    def choose_perk(self, perk) -> bool:
        if self.state.phase is not SessionPhase.PERK_SELECTION:
            logger.debug("perk choice ignored in %s", self.state.phase)
            return False
        perk_id = getattr(perk, "value", perk)
        offered = {p.type.value for p in self.offered_perks}
        if perk_id not in offered:
            logger.warning("perk %r was not offered (%s)", perk_id, sorted(offered))
            return False
        coins = self.perks.apply_perk(perk_id)
        self._award_coins(coins, self.state.current_level)
        self.offered_perks = []
        self._enter_level(self.state.current_level + 1)
        return True

    # ---- Terminal ----

    def _game_over(self) -> None:
        st = self.state
        self.countdown.freeze()
        self._sync_time()
        self._set_phase(SessionPhase.GAME_OVER)
        self.store.update_max_level(st.current_level)
        self.events.push(GameOver(st.current_level, self.combo.max_combo, st.coins_earned))
        logger.info("game over at level %d (max combo %d)", st.current_level, self.combo.max_combo)

    # ---- Presentation ----

    def snapshot(self) -> SessionSnapshot:
        st = self.state
        remaining = 0
        if self.level_cfg is not None and self.level_cfg.is_boss:
            remaining = ROUNDS_PER_LEVEL - st.rounds_completed_this_level
        return SessionSnapshot(
            time=self.countdown.get(),
            combo=self.combo.current_combo,
            level=st.current_level,
            round=st.current_round,
            is_fever=self.combo.is_fever,
            boss_stages_remaining=remaining,
            phase=st.phase,
            coins_earned=st.coins_earned,
        )


__all__ = ["SessionTuning", "SessionState", "SessionSnapshot", "GameSession"]
