"""Text rendering of processes."""

from .cards import action_label, render_board, render_card

__all__ = ["action_label", "render_board", "render_card"]
