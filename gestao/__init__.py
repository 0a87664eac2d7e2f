# gestao/__init__.py
# Backend de gestão: cadastros, estoque, vendas, compras, produção, financeiro e NF-e.

__version__ = "1.0.0"
