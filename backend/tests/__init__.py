"""
Who Am I? Backend Test Suite

Test structure:
- unit/: Test components in isolation with mocks
- integration/: Test full game flows against a scripted oracle
- mocks/: Mock implementations for testing
"""
