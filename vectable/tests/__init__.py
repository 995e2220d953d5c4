"""
Tests Module: Unit and Integration Tests

Test Coverage:
    - Kernels (normalization, dot, cosim, Hamming)
    - Encodings (binary quantization, binary32 blobs, dimension ceilings)
    - Storage backends (SQLite, in-memory, transactions)
    - Collection manager and two-stage search
    - Configuration, errors, logging, CLI
"""
