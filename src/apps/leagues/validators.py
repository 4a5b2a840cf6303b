from django.core.exceptions import ValidationError


def min_players_error(league, count: int) -> str | None:
    if count < league.min_players:
        return f"Must have at least {league.min_players} players."
    return None


def max_players_error(league, count: int) -> str | None:
    if league.max_players and count > league.max_players:
        return f"Must have no more than {league.max_players} players."
    return None


def player_count_bounds_error(league, count: int) -> str | None:
    return min_players_error(league, count) or max_players_error(league, count)


def validate_player_count(league, count: int) -> None:
    """max_players == 0 leaves the roster size unbounded above."""
    message = player_count_bounds_error(league, count)
    if message:
        raise ValidationError({"players": ValidationError(message, code="player_count")})
