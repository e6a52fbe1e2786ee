"""Search query composition: typed fragments, match builders, union composer."""
