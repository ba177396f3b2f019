#!/usr/bin/env python3
"""
Terminal client for the dealer's choice poker engine.

Usage:
    python cli.py                        # 1 human + 3 medium bots, dealer's choice
    python cli.py --bots 5 --difficulty hard
    python cli.py --variant seven_card_stud
    python cli.py --stack 500 --seed 7
    python cli.py --watch --hands 10     # spectate ten bot-only hands
"""
from __future__ import annotations

import argparse
import logging
import random
import sys
from typing import List, Optional

from dealers_choice.config import TableConfig, VARIANT_IDS
from dealers_choice.game.actions import HandAbortedError, PlayerAction
from dealers_choice.game.engine import PokerTable
from dealers_choice.game.game_state import GameVariant
from dealers_choice.game.player import Player
from dealers_choice.models.snapshot import HIDDEN_CARD, TableSnapshot

MIN_SEATS, MAX_SEATS = 2, 6


# -- ANSI colors ---------------------------------------------------------------

RESET  = "\033[0m"
BOLD   = "\033[1m"
DIM    = "\033[2m"
RED    = "\033[91m"
GREEN  = "\033[92m"
YELLOW = "\033[93m"
BLUE   = "\033[94m"
MAGENTA = "\033[95m"
CYAN   = "\033[96m"
WHITE  = "\033[97m"

SUIT_SYMBOLS = {"c": "♣", "d": "♦", "h": "♥", "s": "♠"}
SUIT_COLORS  = {"c": GREEN, "d": BLUE, "h": RED, "s": WHITE}


def fmt_card(card_str: str, wild_ranks: List[str] = ()) -> str:
    """Pretty-print a card like 'Ah' → colored 'A♥'. Jokers print as ★."""
    if not card_str or card_str == HIDDEN_CARD:
        return f"{DIM}[??]{RESET}"
    if card_str == "Jk":
        return f"{MAGENTA}{BOLD}★{RESET}"
    rank, suit_ch = card_str[:-1], card_str[-1]
    sym = SUIT_SYMBOLS.get(suit_ch, suit_ch)
    clr = SUIT_COLORS.get(suit_ch, "")
    mark = f"{MAGENTA}*{RESET}" if rank in wild_ranks else ""
    return f"{clr}{BOLD}{rank}{sym}{RESET}{mark}"


def fmt_cards(cards: List[str], wild_ranks: List[str] = ()) -> str:
    return " ".join(fmt_card(c, wild_ranks) for c in cards)


def fmt_chips(n: int) -> str:
    return f"{YELLOW}${n:,}{RESET}"


# -- Display helpers -----------------------------------------------------------

def print_divider(label: str = "") -> None:
    if label:
        print(f"\n{DIM}{'─' * 20} {BOLD}{WHITE}{label} {DIM}{'─' * 20}{RESET}")
    else:
        print(f"{DIM}{'─' * 60}{RESET}")


def print_table(snap: TableSnapshot) -> None:
    """Print the table as the viewer sees it."""
    wild_ranks = snap.wilds.wild_ranks
    header = f"  {BOLD}{snap.variant_name or 'Dealer choosing'}{RESET}"
    if snap.wilds.options:
        header += f"  wild: {MAGENTA}{', '.join(snap.wilds.options)}{RESET}"
    if snap.stage:
        header += f"  {DIM}[{snap.stage}]{RESET}"
    print(header)
    if snap.community_cards:
        print(f"  Board: {fmt_cards(snap.community_cards)}")
    print(f"  Pot:   {fmt_chips(snap.pot)}")
    if len(snap.pots) > 1:
        for i, pot in enumerate(snap.pots):
            print(f"    {DIM}pot {i + 1}: {pot.amount} ({', '.join(pot.eligible)}){RESET}")
    print()

    for seat in snap.seats:
        if seat.is_eliminated:
            continue
        marker_parts = []
        if seat.is_dealer:
            marker_parts.append(f"{YELLOW}D{RESET}")
        if seat.is_folded:
            marker_parts.append(f"{DIM}folded{RESET}")
        if seat.is_all_in:
            marker_parts.append(f"{RED}{BOLD}ALL-IN{RESET}")
        if seat.hand_name:
            marker_parts.append(f"{CYAN}{seat.hand_name}{RESET}")
        markers = f" ({', '.join(marker_parts)})" if marker_parts else ""
        bet_str = f"  bet {fmt_chips(seat.bet)}" if seat.bet > 0 else ""
        active = f"{CYAN}>{RESET} " if seat.is_current else "  "
        cards = fmt_cards(seat.cards, wild_ranks)
        print(f"  {active}{seat.name:<12} {fmt_chips(seat.chips):>18}  {cards}{bet_str}{markers}")
    print()


def print_hand_result(snap: TableSnapshot) -> None:
    print_divider("RESULT")
    for seat in snap.seats:
        if seat.result in ("win", "split"):
            hand = f"  ({seat.hand_name})" if seat.hand_name else ""
            print(f"  {GREEN}{BOLD}{seat.name} wins {fmt_chips(seat.payout)}{RESET}{hand}")
    print(f"  {DIM}{snap.last_message}{RESET}\n")


# -- Input helpers -------------------------------------------------------------

def ask(prompt: str) -> str:
    try:
        return input(f"\n  {BOLD}{prompt}{RESET}").strip().lower()
    except (EOFError, KeyboardInterrupt):
        print()
        sys.exit(0)


def prompt_variant() -> PlayerAction:
    print("  You deal. Choose the game:")
    for i, variant in enumerate(GameVariant, 1):
        print(f"  [{i}] {variant.display_name}")
    while True:
        raw = ask("Variant: ")
        if raw.isdigit() and 1 <= int(raw) <= len(GameVariant):
            return PlayerAction.choose_variant(list(GameVariant)[int(raw) - 1].value)
        print(f"  {DIM}Enter 1-{len(GameVariant)}{RESET}")


def prompt_wilds(offered: List[str], stud: bool) -> PlayerAction:
    print(f"  Wild card options: {', '.join(offered)}")
    raw = ask("Wilds (space separated, blank for none): ")
    wilds = [w for w in raw.replace(",", " ").split() if w]
    wilds = [w.upper() if len(w) == 1 and w.isalpha() else w for w in wilds]
    last_down = None
    if stud:
        last_down = ask("Deal 7th street face down? [Y/n]: ") not in ("n", "no")
    return PlayerAction.choose_wilds(wilds, last_down)


def prompt_bet(snap: TableSnapshot) -> PlayerAction:
    options = [f"  {RED}[f]{RESET} Fold"]
    if "check" in snap.valid_actions:
        options.append(f"  {GREEN}[c]{RESET} Check")
    if "call" in snap.valid_actions:
        options.append(f"  {BLUE}[c]{RESET} Call {fmt_chips(snap.call_amount)}")
    if "raise" in snap.valid_actions:
        options.append(f"  {YELLOW}[r]{RESET} Raise by ({fmt_chips(snap.min_raise)}–{fmt_chips(snap.max_raise)})")
    if "all_in" in snap.valid_actions:
        options.append(f"  {RED}{BOLD}[a]{RESET} All-in")
    print("\n".join(options))

    while True:
        raw = ask("Your action: ")
        if raw in ("f", "fold"):
            return PlayerAction.fold()
        if raw in ("c", "call", "check"):
            return PlayerAction.check() if "check" in snap.valid_actions else PlayerAction.call()
        if raw in ("a", "allin", "all-in", "all_in"):
            return PlayerAction.all_in()
        if raw.startswith("r"):
            parts = raw.split()
            try:
                amount = int(parts[1]) if len(parts) >= 2 else int(ask(f"Raise by ({snap.min_raise}–{snap.max_raise}): "))
            except ValueError:
                print(f"  {RED}Invalid amount.{RESET}")
                continue
            return PlayerAction.raise_by(amount)
        print(f"  {DIM}Enter f/c/r/a (or 'r 10' to raise by 10){RESET}")


def prompt_draw() -> PlayerAction:
    raw = ask("Discard which cards? (positions 1-5, blank to stand pat): ")
    if not raw:
        return PlayerAction.stand_pat()
    try:
        return PlayerAction.discard([int(tok) - 1 for tok in raw.replace(",", " ").split()])
    except ValueError:
        return PlayerAction.discard([-1])


# -- Synchronous game driver ---------------------------------------------------

class CLIGame:
    """Drive the poker engine synchronously from the terminal."""

    def __init__(
        self,
        num_bots: int = 3,
        difficulty: str = "medium",
        variant: Optional[str] = None,
        stack: int = 1000,
        watch: bool = False,
        max_hands: int = 0,
        seed: Optional[int] = None,
    ) -> None:
        config = TableConfig(starting_stack=stack, variant_lock=variant, max_seats=max(MIN_SEATS, min(MAX_SEATS, num_bots + (0 if watch else 1))))
        self.table = PokerTable("cli", config, random.Random(seed))
        self.watch = watch
        self.max_hands = max_hands
        self.human_id: Optional[str] = None

        if not watch:
            self.human_id = "human"
            self.table.add_player(Player("human", "You"))
        for i in range(num_bots):
            self.table.add_player(Player(f"bot-{i}", f"Bot {i + 1}", is_bot=True, bot_difficulty=difficulty))

    def _is_human(self, player_id: Optional[str]) -> bool:
        return player_id is not None and player_id == self.human_id

    def run(self) -> None:
        state = self.table.state
        print(f"\n{BOLD}{'=' * 60}{RESET}")
        print(f"{BOLD}  Dealer's Choice Poker{RESET}")
        print(f"  {len(state.players)} players, {fmt_chips(self.table.config.starting_stack)} starting stack")
        if self.max_hands:
            print(f"  Playing {self.max_hands} hand(s)")
        print(f"{BOLD}{'=' * 60}{RESET}")

        while self.table.awaiting is not None:
            if self.table.awaiting == "players":
                print(f"\n{RED}At least two players are needed to deal.{RESET}")
                break
            if self.human_id:
                human = state.get_player(self.human_id)
                if human.is_eliminated:
                    print(f"\n{RED}{BOLD}You're out of chips! Game over.{RESET}")
                    break
            if self.table.awaiting == "next_hand" and self.max_hands and state.hand_number >= self.max_hands:
                break
            self._step()

        print_divider("CHIP COUNTS")
        standings = sorted(state.players, key=lambda p: p.chips, reverse=True)
        for i, p in enumerate(standings):
            marker = f" {DIM}(out){RESET}" if p.chips == 0 else ""
            print(f"  {i + 1}. {p.name:<12} {fmt_chips(p.chips)}{marker}")
        print()

    def _step(self) -> None:
        table = self.table
        awaiting = table.awaiting
        if awaiting in ("choose_variant", "choose_wilds"):
            actor = table.dealer_player_id
        elif awaiting in ("bet", "draw"):
            actor = table.current_player_id
        else:
            actor = table.dealer_player_id

        if self._is_human(actor):
            action = self._ask_human(awaiting)
        else:
            action = table.bot_action(actor)

        hand_before = table.state.hand_number
        try:
            result = table.submit(actor, action)
        except HandAbortedError as exc:
            print(f"  {RED}{exc}{RESET}")
            return
        if not result.valid:
            print(f"  {RED}{result.message}{RESET}")
            return

        snap = table.get_state(self.human_id)
        if awaiting == "buy_in":
            print_divider(f"HAND #{snap.hand_number}")
            print(f"  Dealer: {table.state.dealer.name}")
        elif not self._is_human(actor) and awaiting not in ("next_hand",):
            print(f"  {DIM}{snap.last_message}{RESET}")
        if result.hand_over and table.state.hand_number == hand_before:
            print_table(snap)
            print_hand_result(snap)

    def _ask_human(self, awaiting: str) -> PlayerAction:
        table = self.table
        snap = table.get_state(self.human_id)
        if awaiting == "choose_variant":
            return prompt_variant()
        if awaiting == "choose_wilds":
            return prompt_wilds(table.offered_wilds, table.state.variant is GameVariant.SEVEN_CARD_STUD)
        if awaiting == "draw":
            print_table(snap)
            return prompt_draw()
        if awaiting == "bet":
            print_table(snap)
            return prompt_bet(snap)
        if awaiting == "next_hand":
            ask("Press enter for the next hand ")
            return PlayerAction.next_hand()
        return PlayerAction.buy_in()


# -- Entry point ---------------------------------------------------------------

def main() -> None:
    parser = argparse.ArgumentParser(
        description="Dealer's Choice Poker — CLI",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""\
examples:
  python cli.py                            1 human + 3 medium bots
  python cli.py --bots 5 --difficulty hard  1 human + 5 hard bots
  python cli.py --variant texas_holdem      always hold'em
  python cli.py --watch --hands 20          spectate 20 bot-only hands
  python cli.py --seed 42                   reproducible shuffles
""",
    )
    parser.add_argument("--bots", type=int, default=3, help="number of bots (default: 3)")
    parser.add_argument("--difficulty", choices=["easy", "medium", "hard"], default="medium")
    parser.add_argument("--variant", choices=list(VARIANT_IDS), default=None,
                        help="lock the variant (default: dealer's choice)")
    parser.add_argument("--stack", type=int, default=1000, help="starting stack (default: 1000)")
    parser.add_argument("--watch", action="store_true", help="spectate a bot-only game")
    parser.add_argument("--hands", type=int, default=0, help="number of hands to play (0=unlimited)")
    parser.add_argument("--seed", type=int, default=None, help="random seed")
    parser.add_argument("--verbose", action="store_true", help="debug logging")

    args = parser.parse_args()
    seats = args.bots + (0 if args.watch else 1)
    if not MIN_SEATS <= seats <= MAX_SEATS:
        parser.error(f"the table seats {MIN_SEATS}-{MAX_SEATS} players; --bots {args.bots} gives {seats}")
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    game = CLIGame(
        num_bots=args.bots,
        difficulty=args.difficulty,
        variant=args.variant,
        stack=args.stack,
        watch=args.watch,
        max_hands=args.hands,
        seed=args.seed,
    )
    game.run()


if __name__ == "__main__":
    main()
