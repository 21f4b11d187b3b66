"""Paste url (shortcode) generation

Pastes are addressed by a short, non-sequential Base62 code derived from the
Primary Store's monotonically increasing counter and a secret salt.

Functions:
    generate_shortcode(counter, salt='cloudpaste', length=8, mult=1315423911):
        Encode a counter value into a fixed-length Base62 shortcode.

Example:
    >>> from cloudpaste.utils import generate_shortcode
    >>> code = generate_shortcode(12345, salt='my_secret')
    >>> len(code), code.isalnum()
    (8, True)
"""

import math
import string

import xxhash

from cloudpaste.constants import Defaults


ALPHABET = string.ascii_lowercase + string.ascii_uppercase + string.digits
BASE = len(ALPHABET)


def generate_shortcode(
    counter: int,
    salt: str = Defaults.SHORTCODE_SALT,
    length: int = Defaults.SHORTCODE_LENGTH,
    mult: int = 1315423911,
) -> str:
    """Encode a counter into a deterministic, fixed-length Base62 shortcode.

    The counter goes through an affine permutation `(counter * mult + salt_hash)`
    over the space of BASE**length values, so consecutive counters map to
    unrelated-looking codes while the mapping stays 1:1.

    Args:
        counter (int):
            Non-negative counter value taken from the Primary Store.
        salt (str, optional):
            Secret string offsetting the permutation. Must be non-empty.
        length (int, optional):
            Number of characters in the output. Defaults to 8.
        mult (int, optional):
            Multiplicative factor. Must be coprime with BASE**length.

    Returns:
        str: shortcode made of [a-zA-Z0-9], exactly `length` characters long.

    Raises:
        TypeError: If counter or salt have the wrong type.
        ValueError: If counter is negative, salt is empty or mult is not coprime.

    NOTE:
        Codes only repeat once the counter wraps around BASE**length
        (62**8 ~ 2.18e14 pastes). Obfuscation, not encryption.
    """
    if not isinstance(counter, int):
        raise TypeError(f'Counter must be of type integer (given type: {type(counter)}).')
    if counter < 0:
        raise ValueError(f'Counter must be a non-negative integer (given value: {counter}).')
    if not isinstance(salt, str):
        raise TypeError(f'Salt must be of type string (given type: {type(salt)}).')
    if not salt:
        raise ValueError(f'Salt must be a non-empty string (given value: {salt}).')

    modulo_space = BASE**length
    if math.gcd(mult, modulo_space) != 1:
        raise ValueError(f'Multiplicative factor must be coprime with mod ({modulo_space}) (given value: mult={mult}).')

    salt_hash = xxhash.xxh64_intdigest(salt) % modulo_space
    permuted = (counter * mult + salt_hash) % modulo_space

    # Most significant digit first
    digits = [ALPHABET[(permuted // BASE**i) % BASE] for i in range(length)]
    return ''.join(reversed(digits))
