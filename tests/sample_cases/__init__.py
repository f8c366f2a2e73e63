"""Test case modules found by find_input_test_modules."""
