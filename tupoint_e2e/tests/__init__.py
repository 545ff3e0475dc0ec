"""
Scenario suites, run in file order by a single worker:

    01 - Sign-up flow
    02 - Sign-in flow (one shared user per module)
    03 - Session persistence
    04 - Visual regression (light and dark)
    05 - Theme compliance
    06 - Error handling

The remaining test_* modules cover the harness itself.
"""
