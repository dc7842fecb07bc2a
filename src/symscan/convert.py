from symscan.expr import parse_c_integer


def game_string_to_int(text: str) -> int | None:
    if text.strip().upper() == "TRUE":
        return 1
    if text.strip().upper() == "FALSE":
        return 0
    return parse_c_integer(text)
