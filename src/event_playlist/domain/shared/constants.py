"""Centralized constants for store caches, error codes, and other shared values.

This module provides reusable constants that reduce magic strings and improve maintainability.
"""

from __future__ import annotations


class StoreCaches:
    """Logical caches (key spaces) inside the persistent store."""

    EVENTS = "EVENTS"
    EVENT_EXT = "EVENT_EXT"
    EVENT_LCK = "EVENT_LCK"
    PLAYLISTS = "PLAYLISTS"


class DatabaseTables:
    """Database table names."""

    KV_ENTRIES = "kv_entries"


class SQLPragmas:
    """SQLite PRAGMA statements for database configuration.

    These pragmas are applied to each connection to ensure consistent behavior.
    """

    JOURNAL_MODE_WAL = "PRAGMA journal_mode=WAL"
    BUSY_TIMEOUT = "PRAGMA busy_timeout={timeout}"


class ErrorCodes:
    """Wire-level error codes returned in ``{code, msg}`` bodies."""

    # Playlist
    GENERIC = "PLYLST-42"
    INVALID_REQUEST = "PLYLST-400"
    UNKNOWN_PROVIDER = "PLYLST-100"
    ALREADY_QUEUED = "PLYLST-110"
    PLAYLIST_FULL = "PLYLST-115"
    ALREADY_PLAYED = "PLYLST-120"
    TRACK_DETAIL_FAILED = "PLYLST-130"
    TRACK_NOT_FOUND = "PLYLST-200"
    PLAY_FAILED = "PLYLST-300"
    PLAYLIST_NOT_FOUND = "PLYLST-404"

    # Event
    EVENT_ID_REQUIRED = "EVENT-000"
    EVENT_EXISTS = "EVENT-100"
    EVENT_NOT_FOUND = "EVENT-404"

    # Provider
    NO_DEVICE = "SPTFY-100"
    ACCOUNT_PLAY_FAILED = "SPTFY-500"
    MAJORITY_PLAY_FAILED = "SPTFY-501"
    NO_ACCOUNTS = "SPTFY-513"
    FORBIDDEN = "SPTY-333"
    DEVICE_NOT_FOUND = "SPTY-334"
    PROVIDER_GENERIC = "SPTY-542"


class ExitCodes:
    """Process exit codes; the orchestrator restarts the replica on any of them."""

    INIT_FAILED = 42
    SWEEP_FAILED = 43
    STORE_UNAVAILABLE = 44


class PlaybackLimits:
    """Bounds for the in-process track-end timer (milliseconds)."""

    MAX_TIMEOUT_MS = 10 * 60 * 1000
    FALLBACK_TIMEOUT_MS = 5000
    RETRY_DELAY_MS = 1000
    END_OF_TRACK_SLACK_MS = 10


SYSTEM_USER = "AutoDJ"
"""Identity stamped on autofilled tracks and system-triggered skips."""

LOCK_KEY = "-1"
"""Store key of the sweep lock record inside the lock cache."""

PROTOTYPE_EVENT_ID = "___prototype___"
"""Pseudo event id that reads as a freshly defaulted event."""

SUPPORTED_PROVIDERS = frozenset({"spotify"})

EMERGENCY_TRACK_IDS: tuple[str, ...] = (
    "spotify:4u7EnebtmKWzUH433cf5Qv", "spotify:4pbJqGIASGPr0ZpGpnWkDn",
    "spotify:0DfG1ltJnZyq4Tx3ZLL7ZU", "spotify:5ftamIDoDRpEvlZinDuNNW",
    "spotify:6u7jPi22kF8CTQ3rb9DHE7", "spotify:1NaxD6BhOQ69C4Cdcx5jrP",
    "spotify:3Wz5JAW46aCFe1BwZIePu6", "spotify:720dTtTyYAD9TKSAd9lwrt",
    "spotify:72GtVxWzQSeF7xT4wr3fE0", "spotify:3vkQ5DAB1qQMYO4Mr9zJN6",
    "spotify:5ghIJDpPoe3CfHMGu71E6T", "spotify:59WN2psjkt1tyaxjspN8fp",
    "spotify:3d9DChrdc6BOeFsbrZ3Is0", "spotify:2EoOZnxNgtmZaD8uUmz2nD",
    "spotify:5wj4E6IsrVtn8IBJQOd0Cl", "spotify:3YRCqOhFifThpSRFJ1VWFM",
    "spotify:1hKdDCpiI9mqz1jVHRKG0E", "spotify:5yEPxDjbbzUzyauGtnmVEC",
    "spotify:4d9RTWdrFLVAGhdzvqxkwn", "spotify:5PntSbMHC1ud6Vvl8x56qd",
    "spotify:4P5KoWXOxwuobLmHXLMobV", "spotify:0uppYCG86ajpV2hSR3dJJ0",
    "spotify:0Puj4YlTm6xNzDDADXHMI9", "spotify:7CVYxHq1L0Z4G84jTDS6Jl",
    "spotify:40bynawzslg9U7ACq07fAj", "spotify:45Ia1U4KtIjAPPU7Wv1Sea",
    "spotify:50JK22El2PTIzZBU2liLDI", "spotify:3SVAN3BRByDmHOhKyIDxfC",
    "spotify:2SiXAy7TuUkycRVbbWDEpo", "spotify:7N3PAbqfTjSEU1edb2tY8j",
    "spotify:57JVGBtBLCfHw2muk5416J", "spotify:39shmbIHICJ2Wxnk1fPSdz",
    "spotify:0XIvZ82aDF7JiSi3ZE320u", "spotify:2ZSCy3P1QzpJySCWA6NRIU",
    "spotify:0F0MA0ns8oXwGw66B2BSXm", "spotify:5tVA6TkbaAH9QMITTQRrNv",
    "spotify:5eU8qMd0TpaLqTGDZJaLDs", "spotify:0GONea6G2XdnHWjNZd6zt3",
    "spotify:6gQUbFwwdYXlKdmqRoWKJe", "spotify:51H2y6YrNNXcy3dfc3qSbA",
    "spotify:0dOg1ySSI7NkpAe89Zo0b9", "spotify:3rdxvEfBp86WNcRDLaFEk9",
    "spotify:4lRdpZYTwaPpuKpquO6bo3", "spotify:5ChkMS8OtdzJeqyybCc9R5",
    "spotify:64F1ojnPPiJiFZtYQtHB7r", "spotify:2gQaQUhDCNGfBVXTvxAmXQ",
    "spotify:44hOGg1uFg1XJZGZYNwYmM", "spotify:3xGUsy7FZIOibMKrQGFnRH",
    "spotify:08mG3Y1vljYA6bvDt4Wqkj", "spotify:4yqtwO7MQIIXqoiRBPHAgR",
    "spotify:5VB2p0S9jlSXEUNT5wckIQ", "spotify:4aWn4NHlELpOehxsBaQeoe",
    "spotify:3MRQ3CSjoiV1HFil8ykM9M", "spotify:2vX5WL7s6UdeQyweZEx7PP",
    "spotify:7dhM0KUBxuZV9z5iNodLyn", "spotify:4nuUssdgKFy2QyYHHNkZQW",
    "spotify:03Z0v1NYSk186ajlxqHSx4", "spotify:0TK2YIli7K1leLovkQiNik",
    "spotify:3HCfLj84q3qXdArLlA1dV5", "spotify:6oJ6le65B3SEqPwMRNXWjY",
    "spotify:6osaMSJh9NguagEDQcZaKx", "spotify:3yNZ5r3LKfdmjoS3gkhUCT",
    "spotify:5itOtNx0WxtJmi1TQ3RuRd", "spotify:3HVWdVOQ0ZA45FuZGSfvns",
    "spotify:2RP8Svo0pMwZXnVcmOffDw", "spotify:5EfMVE2wRmderPBSsEE8j7",
    "spotify:2RSHsoi04658QL5xgQVov3", "spotify:4YhN72dRYL2Z3MsaKyT7rS",
    "spotify:4NoS6rrdfwBBJNrQnosub4", "spotify:4BwQLePZSn9X2HoTwNpoLg",
    "spotify:1IivtUqnUfW9jH3pM08D8U", "spotify:5YVAa5A1w987AIeCn6I0UI",
    "spotify:6ggAYREO7PlFwI2vbOG3dp", "spotify:2KklXplRtxMsBYo474Es0w",
    "spotify:0z0JSkE5Nw3i3nin3BBSuG", "spotify:0Wq6whEjKeAAUi4nEim1DA",
    "spotify:71UXJmNkfsvf9WQnAChwvD", "spotify:31sD77U64ym70wYEMpnSrQ",
    "spotify:4eT8TcG3KKlprFcYePA9gw", "spotify:1ftBkOu4FmMF99JVBIBV0W",
    "spotify:69YoRmAMENjbevhz6cU3kU", "spotify:5LH1z4ma2TN2aVeESXthj9",
    "spotify:030RDC2ayPOUM32F9IH7eE", "spotify:6lXKNdOsnaLv9LwulZbxNl",
    "spotify:2pFrsZe5SzNL467tWyyAbr", "spotify:0XcC71H8QAjrW0NUqXHX1A",
    "spotify:6JNJERZGJwDVgkmbohBw7u", "spotify:417MeJ40upxxf3aNlr5Xbi",
    "spotify:0r1kH7SIkkPP9W7mUknObF", "spotify:1KtMazpCseJ2TjKPas4d7h",
    "spotify:2NVpYQqdraEcQwqT7GhUkh", "spotify:5Jc21xaya2MrHp2KOetrBq",
    "spotify:1QrFAqpGfVOi68MW1Ll3vN", "spotify:5RYLa5P4qweEAKq5U1gdcK",
    "spotify:3dX6WDwnHwYzB5t754oB4T", "spotify:1mv4lh1rW1K6xhxhJmEezy",
    "spotify:4yQw7FR9lcvL6RHtegbJBh", "spotify:3WMbD1OyfKuwWDWMNbPQ4g",
    "spotify:3FmAUR4SPWa3P1KyDf21Fu", "spotify:1pKYYY0dkg23sQQXi0Q5zN",
    "spotify:2Za2mUwmQoSxWPscaY2vxl", "spotify:4eGHlplaq1ME8oetnTuFFf",
    "spotify:7ttxAFobCmQKOJtyw2IKfJ", "spotify:2u8MGAiS2hBVE7GZzTZLQI",
    "spotify:4l2hnfUx0esSbITQa7iJt0", "spotify:3Sw8YpXVQJ8hvAmfZGEeCH",
    "spotify:1qEHgdFqUxFebMPk8s2HLY", "spotify:7yDmjiDuIlGTaWgmvSK9FJ",
    "spotify:4dwrL3Z5U2RZ6MZiKE2PgL", "spotify:3E9goOoljmDVmLdPcGzWuf",
    "spotify:33iAwBBb962LFQei4J0b0b", "spotify:5b88tNINg4Q4nrRbrCXUmg",
    "spotify:4ZrbWwFHHjPoe7cfUBJ9WQ", "spotify:3NWUDziFW8uFfcYNXmrRNH",
    "spotify:2gOaGuy7ZlfVDSnTfPkxpH", "spotify:4KktZd9BGHZjW3sK03O4zo",
    "spotify:714hERk9U1W8FMYkoC83CO", "spotify:19kuZ0IExry8qYJ4lU2A0r",
    "spotify:4O3DSZqeLLEpRrqRIClGD1", "spotify:2Cy7QY8HPLk925AyNAt6OG",
    "spotify:5t9KYe0Fhd5cW6UYT4qP8f", "spotify:49aLCvvEKM5EA8IYwDmtaE",
    "spotify:6pc8xULSlsMdFB3OrqbvZ4", "spotify:7hQJA50XrCWABAu5v6QZ4i",
    "spotify:4pbyDPjFgfPqFTcIMC8xpK", "spotify:6Yr8U5eAe0cLyrshu0xbuU",
    "spotify:0ehmor7tXN9ngqn1rbFIFy", "spotify:19VVmenPRBEdWwg0Vp2lKh",
    "spotify:1ZoE2naC9ySlPLdBZhS1rM", "spotify:6kWJvPfC4DgUpRsXKNa9z9",
)
"""Built-in autofill pool used when an event has no background playlist."""
