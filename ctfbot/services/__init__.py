"""
Services for the CTF stats bot.

Provides the rankings engine (store access, aggregation, identity resolution,
leaderboard rendering and publishing) and the supporting relay, game status
and rate limiting services.
"""
