"""
AI Integration Module for Whispers.

This module handles all OpenAI API interactions used to decorate the game
with narration, missions, chaos events and room log lines.
Contains no game logic - purely AI prompting.
"""

from .client import OpenAIClient, AIResponse
from .narrator import Narrator, NarrativeContext, PlayerContext, RoomInteractionContext

__all__ = [
    'OpenAIClient',
    'AIResponse',
    'Narrator',
    'NarrativeContext',
    'PlayerContext',
    'RoomInteractionContext'
]
