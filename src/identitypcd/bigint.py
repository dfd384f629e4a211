"""
Big-integer codec.

Claims, proofs and circuit inputs receive integers in several shapes:
decimal strings, 0x-prefixed hex strings (as produced by most RSA
tooling) and native Python ints. Everything is normalized to a plain
int before it is compared or handed to a circuit, and is written back
to the wire as a decimal string.

RSA moduli are far wider than a circuit field element, so they are fed
to the circuit as fixed-width little-endian words.
"""

from typing import List, Sequence, Union

from .exceptions import MalformedNumberError


BigNumberish = Union[str, int]

_HEX_DIGITS = frozenset("0123456789abcdefABCDEF")


def normalize(value: BigNumberish) -> int:
    """
    Normalize a big-integer value to a canonical int.

    Args:
        value: A decimal string, a 0x-prefixed hex string, or an int.
            Surrounding whitespace, leading zeros and a leading sign
            are accepted.

    Returns:
        The integer the value denotes.

    Raises:
        MalformedNumberError: If the value is not an int or a numeric string.

    Example:
        >>> normalize("255") == normalize("0xff") == normalize(255)
        True
    """
    # bool is an int subclass but never a meaningful big integer here
    if isinstance(value, bool):
        raise MalformedNumberError(f"Expected a big integer, got bool {value!r}")
    if isinstance(value, int):
        return value
    if not isinstance(value, str):
        raise MalformedNumberError(
            f"Expected a decimal or hex string, got {type(value).__name__}"
        )

    text = value.strip()
    sign = 1
    if text[:1] in ("-", "+"):
        if text[0] == "-":
            sign = -1
        text = text[1:]

    if text[:2].lower() == "0x":
        digits = text[2:]
        if not digits or not all(c in _HEX_DIGITS for c in digits):
            raise MalformedNumberError(f"Malformed hex integer: {value!r}")
        return sign * int(digits, 16)

    # str.isdigit() accepts non-ASCII digits and int() accepts underscores
    if not text or not (text.isascii() and text.isdigit()):
        raise MalformedNumberError(f"Malformed decimal integer: {value!r}")
    try:
        return sign * int(text, 10)
    except ValueError as e:
        # int() caps decimal conversions at sys.get_int_max_str_digits()
        raise MalformedNumberError(f"Decimal integer has too many digits ({len(text)})") from e


def to_decimal(value: BigNumberish) -> str:
    """Encode a big-integer value as its canonical decimal string."""
    return str(normalize(value))


def split_to_words(value: BigNumberish, word_bits: int, num_words: int) -> List[int]:
    """
    Split a non-negative integer into little-endian words.

    Args:
        value: The integer to split.
        word_bits: Width of each word in bits.
        num_words: Number of words to produce.

    Returns:
        A list of num_words ints, least significant word first.

    Raises:
        MalformedNumberError: If the value is negative or too wide.
    """
    n = normalize(value)
    if n < 0:
        raise MalformedNumberError("Cannot split a negative integer into words")
    if n.bit_length() > word_bits * num_words:
        raise MalformedNumberError(
            f"Integer of {n.bit_length()} bits does not fit in "
            f"{num_words} words of {word_bits} bits"
        )

    mask = (1 << word_bits) - 1
    words = []
    for _ in range(num_words):
        words.append(n & mask)
        n >>= word_bits
    return words


def join_words(words: Sequence[BigNumberish], word_bits: int) -> int:
    """Inverse of split_to_words()."""
    n = 0
    for word in reversed(words):
        n = (n << word_bits) | normalize(word)
    return n
