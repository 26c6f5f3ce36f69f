"""Media catalog: inventory of books, discs and digital media"""
