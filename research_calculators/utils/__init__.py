from .rounding import round_half_up, round_count

__all__ = ["round_half_up", "round_count"]
