"""
EMAS test suite.

Tests are organized by module:
- test_tables, test_models, test_sequence: Core tables, data models and utilities
- test_ctd: CTD encoding
- test_pssm, test_miles, test_propensity, test_balanced: Scorers and learners
- test_predictors: Predictor interface and registry
"""
