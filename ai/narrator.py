"""
AI Narrator for Whispers.

Uses OpenAI API to decorate the game with narration, player missions,
chaos events and Room of Secrets log lines. Every generator returns a
fallback text instead of raising, so callers never fail because of it.
Contains no game logic - purely AI prompting.
"""

import logging
from dataclasses import dataclass
from typing import Optional, List, Dict

from utils.constants import (
    FALLBACK_NARRATION, FALLBACK_MISSION, FALLBACK_CHAOS_EVENT, FALLBACK_ROOM_LOG
)
from .client import OpenAIClient

logger = logging.getLogger(__name__)

@dataclass
class NarrativeContext:
    """Public game facts the narrator may use."""
    game_id: str
    current_phase: str
    current_day: int
    player_count: int
    alive_player_count: int
    recent_event: Optional[str] = None

@dataclass
class PlayerContext:
    """The player a mission is written for."""
    name: str
    role: str
    is_alive: bool = True

@dataclass
class RoomInteractionContext:
    """One interaction with a room object."""
    action: str  # DESTROY, CLEAN, PLACE, VISIT
    object_name: str
    player_name: str
    item_name: Optional[str] = None

class Narrator:
    """
    Generates flavor text for the game using OpenAI API.

    All four generators are best-effort: an unavailable client, an API
    failure or an unexpected exception all end in the fallback text.
    """

    def __init__(self, openai_client: Optional[OpenAIClient] = None):
        """
        Initialize narrator.

        Args:
            openai_client: OpenAI client instance (creates new one if None)
        """
        self.client = openai_client or OpenAIClient()
        logger.debug("Narrator initialized")

    def generate_narration(self, context: NarrativeContext) -> str:
        """Generate dramatic narration that sets the mood for a phase."""
        system_prompt = (
            'You are a master storyteller for a social deduction game called "Whispers". '
            'Generate dramatic, atmospheric narration that sets the mood for each phase. '
            'Keep responses under 150 tokens. Use poetic, suspenseful language. '
            'Focus on the tension, mystery, and psychological drama of the game.'
        )

        lines = [
            "Generate narration for:",
            f"- Phase: {context.current_phase}",
            f"- Day: {context.current_day}",
            f"- Players alive: {context.alive_player_count}/{context.player_count}",
        ]
        if context.recent_event:
            lines.append(f"- Recent event: {context.recent_event}")
        lines.append("")
        lines.append("Create atmospheric narration that builds tension and immersion.")

        return self._generate(system_prompt, "\n".join(lines), max_tokens=150,
                              temperature=0.8, fallback=FALLBACK_NARRATION, kind="narration")

    def generate_mission(self, context: NarrativeContext, player: PlayerContext) -> str:
        """Generate a short secret objective that fits the player's role."""
        system_prompt = (
            'You are a mission generator for a social deduction game. '
            "Generate subtle, interesting social objectives that fit the player's role. "
            'Keep missions short (1-2 lines) and verifiable through social interaction. '
            'Missions should encourage roleplay and strategic thinking.'
        )

        if player.role == 'TRAITOR':
            role_guidance = 'Create missions that help the traitor blend in or subtly manipulate without being obvious.'
        else:
            role_guidance = 'Create missions that help the faithful gather information or build trust.'

        user_prompt = "\n".join([
            "Generate a mission for:",
            f"- Player role: {player.role}",
            f"- Game phase: {context.current_phase}",
            f"- Day: {context.current_day}",
            f"- Players alive: {context.alive_player_count}",
            "",
            role_guidance,
            "",
            "Examples:",
            '- Faithful: "Ask another player who they trust the most today."',
            '- Traitor: "Start a fake defense for someone without being too obvious."',
            "",
            "Generate one unique mission:",
        ])

        return self._generate(system_prompt, user_prompt, max_tokens=50,
                              temperature=0.7, fallback=FALLBACK_MISSION, kind="mission")

    def generate_chaos_event(self, context: NarrativeContext) -> str:
        """Generate a surprising twist to shake up the game."""
        system_prompt = (
            'You are a chaos event generator for a social deduction game. '
            'Generate surprising, dramatic twists that shake up the game dynamics. '
            'Keep events short, clear, and impactful. Events should be game-changing but fair.'
        )

        user_prompt = "\n".join([
            "Generate a chaos event for:",
            f"- Phase: {context.current_phase}",
            f"- Day: {context.current_day}",
            f"- Players alive: {context.alive_player_count}/{context.player_count}",
            "",
            "Examples:",
            '- "One random vote will be ignored this round."',
            '- "The next player to speak must reveal their role."',
            '- "All votes are anonymous this round."',
            "",
            "Generate one unique chaos event:",
        ])

        return self._generate(system_prompt, user_prompt, max_tokens=40,
                              temperature=0.8, fallback=FALLBACK_CHAOS_EVENT, kind="chaos event")

    def generate_room_interaction_log(self, context: RoomInteractionContext) -> str:
        """Describe a room interaction poetically without naming the player."""
        system_prompt = (
            'You are a poetic narrator for room interactions in a mystery game. '
            'Generate short, atmospheric descriptions of player actions with symbolic objects. '
            'Use metaphorical language that hints at deeper meaning. Keep responses under 30 tokens.'
        )

        lines = [
            "Describe this action poetically:",
            f"- Action: {context.action}",
            f"- Object: {context.object_name}",
        ]
        if context.item_name:
            lines.append(f"- Item placed: {context.item_name}")
        lines.append("")
        lines.append("Create a mysterious, symbolic description:")

        fallback = FALLBACK_ROOM_LOG.format(object_name=context.object_name.lower())
        return self._generate(system_prompt, "\n".join(lines), max_tokens=30,
                              temperature=0.9, fallback=fallback, kind="room log")

    def _generate(self, system_prompt: str, user_prompt: str, max_tokens: int,
                  temperature: float, fallback: str, kind: str) -> str:
        messages: List[Dict[str, str]] = [
            {"role": "system", "content": system_prompt},
            {"role": "user", "content": user_prompt}
        ]

        try:
            response = self.client.generate_completion(
                messages=messages,
                max_tokens=max_tokens,
                temperature=temperature
            )
        except Exception as e:
            logger.error(f"Error generating {kind}: {e}")
            return fallback

        if response.success and response.content:
            return self._clean_text(response.content)

        logger.warning(f"Failed to generate {kind}: {response.error_message}")
        return fallback

    def _clean_text(self, text: str) -> str:
        """Strip whitespace and wrapping quotes the model likes to add."""
        text = text.strip()
        if len(text) >= 2 and text[0] == text[-1] and text[0] in ('"', "'"):
            text = text[1:-1].strip()
        return text
