"""Backend package: eligibility engine, scoring, DB models, pipelines, API.

The hard filter and scorers are pure functions; the pipelines load records
through SQLAlchemy, run them through the engine and persist match results.
"""
