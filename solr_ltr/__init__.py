"""
Integracja z Solr Learning To Rank.

- solr_client.py: Klient HTTP (wyszukiwanie, feature store, model store)
- ltr.py: Definicje cech i budowa modelu NeuralNetworkModel
"""
