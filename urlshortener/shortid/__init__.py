from urlshortener.shortid.generator import ALPHABET, MAX_ATTEMPTS, ShortIDStore, generate, generate_unique


__all__ = [
    'ALPHABET',
    'MAX_ATTEMPTS',
    'ShortIDStore',
    'generate',
    'generate_unique',
]
