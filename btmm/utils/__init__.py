"""shared helpers: constants, numerics, data io and errors"""
