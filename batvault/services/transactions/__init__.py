"""Spese, entrate e categorie"""
