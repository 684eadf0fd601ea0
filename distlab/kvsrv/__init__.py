"""Namespace for a key/value service; it holds no modules."""