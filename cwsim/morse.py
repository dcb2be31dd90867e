from __future__ import annotations

import re
from typing import Iterator, List

# ITU Morse (letters, digits and the punctuation used in exchanges)
MORSE_CODE = {
    "A": ".-",
    "B": "-...",
    "C": "-.-.",
    "D": "-..",
    "E": ".",
    "F": "..-.",
    "G": "--.",
    "H": "....",
    "I": "..",
    "J": ".---",
    "K": "-.-",
    "L": ".-..",
    "M": "--",
    "N": "-.",
    "O": "---",
    "P": ".--.",
    "Q": "--.-",
    "R": ".-.",
    "S": "...",
    "T": "-",
    "U": "..-",
    "V": "...-",
    "W": ".--",
    "X": "-..-",
    "Y": "-.--",
    "Z": "--..",
    "0": "-----",
    "1": ".----",
    "2": "..---",
    "3": "...--",
    "4": "....-",
    "5": ".....",
    "6": "-....",
    "7": "--...",
    "8": "---..",
    "9": "----.",
    "/": "-..-.",
    "?": "..--..",
    "=": "-...-",
    ".": ".-.-.-",
    ",": "--..--",
    "-": "-....-",
}

# Prosigns are written as <BK>, <SK>, ... and keyed without letter gaps.
TOKEN_RE = re.compile(r"<[A-Z0-9]+>|[A-Z0-9/?=.,-]+")


def normalize_text(text: str) -> str:
    return " ".join(text.strip().upper().split())


def tokenize_text(text: str) -> List[str]:
    return TOKEN_RE.findall(normalize_text(text))


PROSIGN_RE = re.compile(r"<([A-Z0-9]+)>")


def is_prosign_token(token: str) -> bool:
    # Only the bracketed form is a prosign; a bare AR is still Arkansas.
    return PROSIGN_RE.fullmatch(token) is not None


def iter_token_chars(token: str) -> Iterator[str]:
    if is_prosign_token(token):
        yield from token[1:-1]
        return
    yield from token


def token_to_morse_letters(token: str) -> List[str]:
    return [MORSE_CODE[ch] for ch in iter_token_chars(token) if ch in MORSE_CODE]
