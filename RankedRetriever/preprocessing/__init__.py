"""
Preprocessing module for text processing in information retrieval tasks.
Includes tokenization, localisation, lowercase conversion, stop word filtering and stemming.
"""
