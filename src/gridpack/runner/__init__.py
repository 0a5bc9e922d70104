"""Benchmark harness: datasets and the benchmark runner."""
