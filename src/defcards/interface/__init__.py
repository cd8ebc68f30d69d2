# Interface layer
