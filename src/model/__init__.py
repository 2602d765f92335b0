"""
Moduł modelu przewidującego ocenę filmu.

Ten folder zawiera:
- model.py: Architektura sieci neuronowej (PyTorch)
- training.py: Proces trenowania modelu (PyTorch)
- sklearn_training.py: Ten sam model trenowany w scikit-learn
- export.py: Eksport wag do modelu Solr LTR
- visualization.py: Graf modelu i wykresy treningu
"""
