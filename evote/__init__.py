"""Online voting backend: accounts, candidates, one-vote ballots and tallies."""

__version__ = "1.0.0"
