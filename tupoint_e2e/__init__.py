"""
Browser end-to-end suites for the tuPoint web app.

Helper modules:
    fixtures          - test data tables and unique user generation
    locators          - text/role/label locators per screen, wait budgets
    browser           - navigation, readiness, storage, transient-state waits
    workflows         - sign-up, sign-in and profile flows
    outcomes          - acceptable-outcome sets for non-deterministic UI
    visual            - screenshot baselines compared with pixelmatch
    mock_tupoint_app  - in-process mock of the app for harness self-tests
"""
