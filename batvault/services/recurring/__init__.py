"""Transazioni ricorrenti: calendario delle scadenze, elaborazione e gestione"""
