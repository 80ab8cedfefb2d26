"""Redis key layout for short URLs

Every link lives under a single key:

    [<prefix>:]links:<shortcode>:url  ->  target URL (string, 1 year TTL)

The prefix namespaces one deployment's links, e.g. "urlshortener:prod", so
several environments can share a Redis database without their shortcodes
colliding.
"""


class RedisKeySchema:
    """Build the `links:<shortcode>:url` keys, namespaced by an optional prefix

    Attributes:
        prefix (str | None):
            Deployment namespace, usually `app_prefix()`. None leaves keys bare.
    """

    def __init__(self, prefix: str | None = None):
        if prefix is not None and not isinstance(prefix, str):
            raise TypeError(f'Prefix must be of type string (given type: {type(prefix)}).')

        self.prefix = prefix

    def link_url_key(self, shortcode: str) -> str:
        """Key holding the target URL of `shortcode`"""
        key = f'links:{shortcode}:url'
        return key if self.prefix is None else f'{self.prefix}:{key}'
