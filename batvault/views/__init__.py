"""Blueprint HTTP dell'applicazione; gli errori passano dal gestore di BatvaultError"""
